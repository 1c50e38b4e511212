from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def _date(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class UserFixture:
    email: str
    name: str
    password: str
    timezone: str
    role: str = "USER"


@dataclass(frozen=True)
class MembershipFixture:
    email: str
    role: str = "MEMBER"


@dataclass(frozen=True)
class TenantFixture:
    slug: str
    name: str
    plan: str
    members: tuple[MembershipFixture, ...]


@dataclass(frozen=True)
class ContactFixture:
    name: str
    email: str
    role: str
    phone: str
    notes: str


@dataclass(frozen=True)
class ClientFixture:
    name: str
    industry: str
    company_size: str
    timezone: str
    ai_maturity: str
    notes: str
    contacts: tuple[ContactFixture, ...] = ()
    tenant_slug: str = "default"


@dataclass(frozen=True)
class MeetingFixture:
    title: str
    date: datetime
    time: str
    attendees: tuple[str, ...]
    notes: str
    decisions: str
    risks: str


@dataclass(frozen=True)
class TaskFixture:
    title: str
    description: str
    status: str
    priority: str
    due_date: datetime | None = None
    # Defaults to the project owner when unset.
    owner_email: str | None = None
    milestone_name: str | None = None
    source_meeting_title: str | None = None


@dataclass(frozen=True)
class MilestoneFixture:
    name: str
    description: str
    status: str
    due_date: datetime
    tasks: tuple[TaskFixture, ...] = ()


@dataclass(frozen=True)
class RiskFixture:
    title: str
    description: str
    severity: str
    status: str = "IDENTIFIED"
    suggested_mitigation: str | None = None
    source_meeting_title: str | None = None


@dataclass(frozen=True)
class DocumentFixture:
    name: str
    type: str
    status: str = "DRAFT"
    content: dict[str, Any] | None = None


@dataclass(frozen=True)
class ProjectFixture:
    name: str
    client_name: str
    owner_email: str
    status: str
    start_date: datetime
    end_date: datetime
    health_status: str
    status_summary: str
    meetings: tuple[MeetingFixture, ...] = ()
    milestones: tuple[MilestoneFixture, ...] = ()
    tasks: tuple[TaskFixture, ...] = ()
    risks: tuple[RiskFixture, ...] = ()
    documents: tuple[DocumentFixture, ...] = ()
    # Tenant of the client; client names are only unique within a tenant.
    client_tenant: str = "default"


@dataclass(frozen=True)
class StageFixture:
    name: str
    order: int
    probability: int
    type: str
    color: str


@dataclass(frozen=True)
class AccountFixture:
    name: str
    tenants: tuple[str, ...]
    type: str
    industry: str
    employee_count: str
    annual_revenue: float
    health_score: int


@dataclass(frozen=True)
class CrmContactFixture:
    first_name: str
    last_name: str
    tenants: tuple[str, ...]
    # Local part only; the tenant slug supplies the domain.
    email: str
    job_title: str
    lifecycle: str
    lead_source: str


@dataclass(frozen=True)
class OpportunityFixture:
    name: str
    tenants: tuple[str, ...]
    amount: float
    probability: int
    stage_name: str


@dataclass(frozen=True)
class LabelFixture:
    name: str
    color: str
    description: str
    tenants: tuple[str, ...]


@dataclass(frozen=True)
class IssueFixture:
    title: str
    tenants: tuple[str, ...]
    type: str
    status: str
    priority: str
    description: str
    labels: tuple[str, ...] = ()


@dataclass(frozen=True)
class LeadFixture:
    name: str
    tenants: tuple[str, ...]
    email: str
    company: str
    source: str
    service_interest: str
    status: str


@dataclass(frozen=True)
class BrandAssetFixture:
    name: str
    type: str
    description: str
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class BrandProfileFixture:
    client_name: str
    name: str
    description: str
    primary_color: str
    secondary_color: str
    accent_color: str
    tone_voice_guidelines: str
    key_messages: tuple[str, ...]
    assets: tuple[BrandAssetFixture, ...] = ()
    client_tenant: str = "default"


@dataclass(frozen=True)
class CampaignFixture:
    name: str
    client_name: str
    description: str
    status: str
    start_date: datetime
    end_date: datetime
    goals: dict[str, Any]
    created_by_email: str
    client_tenant: str = "default"


@dataclass(frozen=True)
class ContentFixture:
    name: str
    client_name: str
    type: str
    channel: str
    status: str
    summary: str
    content: dict[str, Any]
    tags: tuple[str, ...] = ()
    project_name: str | None = None
    campaign_name: str | None = None
    created_by_email: str | None = None
    published_at: datetime | None = None
    client_tenant: str = "default"


@dataclass(frozen=True)
class TenantProjectFixture:
    """Internal project seeded under the same name in each listed tenant."""

    name: str
    tenants: tuple[str, ...]
    status: str
    health_status: str
    status_summary: str


@dataclass(frozen=True)
class TenantTaskFixture:
    title: str
    tenants: tuple[str, ...]
    status: str
    priority: str
    project_name: str = "Digital Transformation"


@dataclass(frozen=True)
class ExpenseCategoryFixture:
    name: str
    description: str


@dataclass(frozen=True)
class ExpenseFixture:
    description: str
    tenants: tuple[str, ...]
    amount: float
    status: str
    vendor: str
    category_name: str = "Office Supplies"


@dataclass(frozen=True)
class BudgetFixture:
    name: str
    tenants: tuple[str, ...]
    amount: float
    period: str
    category_name: str = "Marketing"


@dataclass(frozen=True)
class RecurringCostFixture:
    name: str
    tenants: tuple[str, ...]
    amount: float
    frequency: str
    vendor: str
    category_name: str = "Software"


@dataclass(frozen=True)
class AIAssetFixture:
    name: str
    type: str
    description: str
    content: dict[str, Any]
    tags: tuple[str, ...] = ()
    is_template: bool = False
    # Shared templates have no client.
    client_name: str | None = None
    client_tenant: str = "default"
    project_names: tuple[str, ...] = ()
    created_by_email: str | None = None


@dataclass(frozen=True)
class SeedFixtures:
    users: tuple[UserFixture, ...]
    tenants: tuple[TenantFixture, ...]
    clients: tuple[ClientFixture, ...]
    projects: tuple[ProjectFixture, ...]
    stages: tuple[StageFixture, ...]
    accounts: tuple[AccountFixture, ...]
    crm_contacts: tuple[CrmContactFixture, ...]
    opportunities: tuple[OpportunityFixture, ...]
    labels: tuple[LabelFixture, ...]
    issues: tuple[IssueFixture, ...]
    leads: tuple[LeadFixture, ...]
    brand_profiles: tuple[BrandProfileFixture, ...]
    campaigns: tuple[CampaignFixture, ...]
    contents: tuple[ContentFixture, ...]
    tenant_projects: tuple[TenantProjectFixture, ...]
    tenant_tasks: tuple[TenantTaskFixture, ...]
    expense_categories: tuple[ExpenseCategoryFixture, ...]
    expenses: tuple[ExpenseFixture, ...]
    budgets: tuple[BudgetFixture, ...]
    recurring_costs: tuple[RecurringCostFixture, ...]
    ai_assets: tuple[AIAssetFixture, ...]
    pipeline_name: str = field(default="Default Sales Pipeline")


ALL_TENANTS = ("default", "acme-corp", "global-tech")

# Dated rows without an explicit date are anchored here so re-runs write identical values.
SEED_ANCHOR = _date("2025-01-06")


def build_users() -> tuple[UserFixture, ...]:
    return (
        UserFixture("avery.chen@pmo.test", "Avery Chen", "PmoDemo123!", "America/Chicago"),
        UserFixture("priya.desai@pmo.test", "Priya Desai", "PmoDemo123!", "America/New_York"),
        UserFixture("marco.silva@pmo.test", "Marco Silva", "PmoDemo123!", "America/Los_Angeles"),
        UserFixture("admin@pmo.test", "Testing Admin", "AdminDemo123!", "UTC", role="ADMIN"),
        UserFixture("acme.admin@pmo.test", "Acme Admin", "AcmeDemo123!", "UTC", role="ADMIN"),
        UserFixture("acme.user1@pmo.test", "Acme User One", "AcmeDemo123!", "UTC"),
        UserFixture("acme.user2@pmo.test", "Acme User Two", "AcmeDemo123!", "UTC"),
        UserFixture("global.admin@pmo.test", "Global Admin", "GlobalDemo123!", "UTC", role="ADMIN"),
        UserFixture("global.user1@pmo.test", "Global User One", "GlobalDemo123!", "UTC"),
    )


def build_tenants() -> tuple[TenantFixture, ...]:
    # The first member of each tenant owns its CRM records.
    return (
        TenantFixture(
            slug="default",
            name="Launchpad Consulting Partners",
            plan="PROFESSIONAL",
            members=(
                MembershipFixture("admin@pmo.test", "OWNER"),
                MembershipFixture("avery.chen@pmo.test"),
                MembershipFixture("priya.desai@pmo.test"),
                MembershipFixture("marco.silva@pmo.test"),
            ),
        ),
        TenantFixture(
            slug="acme-corp",
            name="Acme Corporation",
            plan="PROFESSIONAL",
            members=(
                MembershipFixture("acme.admin@pmo.test", "OWNER"),
                MembershipFixture("acme.user1@pmo.test"),
                MembershipFixture("acme.user2@pmo.test"),
            ),
        ),
        TenantFixture(
            slug="global-tech",
            name="Global Technologies",
            plan="STARTER",
            members=(
                MembershipFixture("global.admin@pmo.test", "OWNER"),
                MembershipFixture("global.user1@pmo.test"),
            ),
        ),
    )


def build_clients() -> tuple[ClientFixture, ...]:
    return (
        ClientFixture(
            name="Acme Manufacturing",
            industry="Industrial Manufacturing",
            company_size="MEDIUM",
            timezone="America/Chicago",
            ai_maturity="LOW",
            notes="Pilot predictive maintenance use cases with OT data cleanup underway.",
            contacts=(
                ContactFixture(
                    "Dana Patel",
                    "dana.patel@acme.test",
                    "Operations Director",
                    "+1-312-555-0101",
                    "Executive sponsor focused on downtime reduction and safety.",
                ),
                ContactFixture(
                    "Miguel Rodriguez",
                    "miguel.rodriguez@acme.test",
                    "Maintenance Manager",
                    "+1-312-555-0118",
                    "Coordinates data pulls from the plant historian and CMMS.",
                ),
            ),
        ),
        ClientFixture(
            name="Brightside Health Group",
            industry="Healthcare",
            company_size="SMALL",
            timezone="America/Los_Angeles",
            ai_maturity="MEDIUM",
            notes="Document automation and patient triage assistant under evaluation.",
            contacts=(
                ContactFixture(
                    "Sarah Kim",
                    "sarah.kim@brightside.test",
                    "Innovation Lead",
                    "+1-415-555-0199",
                    "Owns the AI roadmap and stakeholder communications.",
                ),
                ContactFixture(
                    "Omar Greene",
                    "omar.greene@brightside.test",
                    "IT Manager",
                    "+1-415-555-0142",
                    "Security and access point; schedules integration reviews.",
                ),
            ),
        ),
        ClientFixture(
            name="Launchpad Consulting Partners",
            industry="Consulting",
            company_size="SMALL",
            timezone="America/New_York",
            ai_maturity="HIGH",
            notes="AI consulting firm specializing in strategy and implementation.",
        ),
    )


def build_projects() -> tuple[ProjectFixture, ...]:
    return (
        ProjectFixture(
            name="AI Strategy Roadmap",
            client_name="Launchpad Consulting Partners",
            owner_email="admin@pmo.test",
            status="IN_PROGRESS",
            start_date=_date("2024-01-01"),
            end_date=_date("2024-06-30"),
            health_status="ON_TRACK",
            status_summary=(
                "Q1 thought leadership campaign launched successfully. "
                "Content pipeline healthy with 8 pieces in various stages."
            ),
            meetings=(
                MeetingFixture(
                    title="Q1 Marketing Planning",
                    date=_date("2024-01-10"),
                    time="10:00 AM ET",
                    attendees=("Testing Admin", "Marketing Team"),
                    notes="Outlined Q1 content strategy focusing on AI thought leadership and case studies.",
                    decisions="Prioritize LinkedIn and blog content for B2B audience.",
                    risks="Content production capacity may limit output.",
                ),
                MeetingFixture(
                    title="Content Performance Review",
                    date=_date("2024-02-01"),
                    time="02:00 PM ET",
                    attendees=("Testing Admin", "Analytics Team"),
                    notes="Reviewed January content performance. LinkedIn posts averaging 500+ impressions.",
                    decisions="Double down on case study content based on engagement data.",
                    risks="Need more client testimonials for case studies.",
                ),
            ),
            milestones=(
                MilestoneFixture(
                    name="Q1 Content Launch",
                    description="Publish initial batch of thought leadership content.",
                    status="COMPLETED",
                    due_date=_date("2024-01-31"),
                    tasks=(
                        TaskFixture(
                            "Publish AI customer service blog post",
                            "Final review and publish the flagship blog post.",
                            "DONE",
                            "P1",
                            due_date=_date("2024-01-15"),
                        ),
                        TaskFixture(
                            "Schedule LinkedIn campaign",
                            "Set up LinkedIn posts for Q1 with scheduling tool.",
                            "DONE",
                            "P1",
                            due_date=_date("2024-01-20"),
                        ),
                    ),
                ),
                MilestoneFixture(
                    name="Case Study Development",
                    description="Develop detailed case studies from client projects.",
                    status="IN_PROGRESS",
                    due_date=_date("2024-03-15"),
                    tasks=(
                        TaskFixture(
                            "Draft manufacturing case study",
                            "Write case study based on predictive maintenance project.",
                            "IN_PROGRESS",
                            "P1",
                            due_date=_date("2024-02-28"),
                            source_meeting_title="Content Performance Review",
                        ),
                        TaskFixture(
                            "Client approval for healthcare case study",
                            "Get sign-off from Brightside Health for public case study.",
                            "BACKLOG",
                            "P2",
                            due_date=_date("2024-03-10"),
                        ),
                    ),
                ),
                MilestoneFixture(
                    name="Q2 Campaign Planning",
                    description="Plan manufacturing-focused campaign for Q2.",
                    status="NOT_STARTED",
                    due_date=_date("2024-04-01"),
                ),
            ),
            tasks=(
                TaskFixture(
                    "Review content calendar",
                    "Weekly review of upcoming content and deadlines.",
                    "IN_PROGRESS",
                    "P2",
                ),
                TaskFixture(
                    "Update brand guidelines",
                    "Refresh brand guidelines with new color palette.",
                    "BACKLOG",
                    "P3",
                ),
            ),
            risks=(
                RiskFixture(
                    title="Content production capacity",
                    description="Content production capacity may limit output.",
                    severity="MEDIUM",
                    suggested_mitigation="Line up a freelance writer for the case study backlog.",
                    source_meeting_title="Q1 Marketing Planning",
                ),
            ),
            documents=(
                DocumentFixture(
                    name="Q1 Content Strategy Brief",
                    type="PROJECT_PLAN",
                    status="APPROVED",
                    content={"channels": ["LinkedIn", "Blog"], "cadence": "weekly"},
                ),
            ),
        ),
        ProjectFixture(
            name="Predictive Maintenance Rollout",
            client_name="Acme Manufacturing",
            owner_email="avery.chen@pmo.test",
            status="IN_PROGRESS",
            start_date=_date("2024-01-15"),
            end_date=_date("2024-08-30"),
            health_status="AT_RISK",
            status_summary=(
                "Data pipeline delays due to pending historian credentials. "
                "Working to unblock access this week."
            ),
            meetings=(
                MeetingFixture(
                    title="Operations Pulse Check",
                    date=_date("2024-02-05"),
                    time="09:00 AM CT",
                    attendees=("Avery Chen", "Dana Patel", "Miguel Rodriguez", "Priya Desai"),
                    notes="Reviewed historian export progress and CMMS cleanup blockers.",
                    decisions="Agreed to prioritize validation on the top three bottleneck assets.",
                    risks="Data pipeline delay if historian credentials are not provisioned.",
                ),
                MeetingFixture(
                    title="Pilot Kickoff Prep",
                    date=_date("2024-02-15"),
                    time="02:00 PM CT",
                    attendees=("Avery Chen", "Dana Patel", "Plant 3 supervisors"),
                    notes="Walked through pilot plan and asset readiness checklist.",
                    decisions="Pilot scope limited to extrusion and packing lines.",
                    risks="Need final sign-off on OT change window.",
                ),
            ),
            milestones=(
                MilestoneFixture(
                    name="Data Lake Readiness",
                    description="Ensure historian exports and CMMS data are normalized.",
                    status="IN_PROGRESS",
                    due_date=_date("2024-03-15"),
                    tasks=(
                        TaskFixture(
                            "Validate ETL transformations",
                            "Review dbt jobs and confirm downtime tags are mapped.",
                            "IN_PROGRESS",
                            "P1",
                            due_date=_date("2024-02-29"),
                            source_meeting_title="Operations Pulse Check",
                        ),
                        TaskFixture(
                            "Finalize historian access policy",
                            "Security review for historian role-based access.",
                            "BLOCKED",
                            "P0",
                            due_date=_date("2024-02-20"),
                            owner_email="priya.desai@pmo.test",
                        ),
                    ),
                ),
                MilestoneFixture(
                    name="Pilot Deployment",
                    description="Deploy the predictive models to Plant 3 lines.",
                    status="NOT_STARTED",
                    due_date=_date("2024-05-31"),
                    tasks=(
                        TaskFixture(
                            "Edge gateway sizing",
                            "Confirm memory footprint and redundancy plans.",
                            "BACKLOG",
                            "P1",
                            source_meeting_title="Pilot Kickoff Prep",
                        ),
                    ),
                ),
                MilestoneFixture(
                    name="Executive Readout",
                    description="Summarize KPI impact and next-phase budget ask.",
                    status="NOT_STARTED",
                    due_date=_date("2024-07-15"),
                ),
            ),
            tasks=(
                TaskFixture(
                    "Weekly ops sync",
                    "Standing meeting with plant ops and data team.",
                    "DONE",
                    "P2",
                    source_meeting_title="Operations Pulse Check",
                ),
                TaskFixture(
                    "Model drift alerts",
                    "Design alert thresholds for pressure sensors.",
                    "IN_PROGRESS",
                    "P1",
                    milestone_name="Pilot Deployment",
                ),
            ),
            risks=(
                RiskFixture(
                    title="Historian credential delay",
                    description="Data pipeline delay if historian credentials are not provisioned.",
                    severity="HIGH",
                    status="MONITORING",
                    suggested_mitigation="Escalate the access request to the plant IT sponsor.",
                    source_meeting_title="Operations Pulse Check",
                ),
                RiskFixture(
                    title="OT change window sign-off",
                    description="Need final sign-off on OT change window.",
                    severity="MEDIUM",
                    source_meeting_title="Pilot Kickoff Prep",
                ),
            ),
            documents=(
                DocumentFixture(name="Pilot Readiness Checklist", type="CHECKLIST"),
            ),
        ),
        ProjectFixture(
            name="AI Intake Modernization",
            client_name="Brightside Health Group",
            owner_email="priya.desai@pmo.test",
            status="PLANNING",
            start_date=_date("2024-02-01"),
            end_date=_date("2024-06-15"),
            health_status="ON_TRACK",
            status_summary=(
                "Care team interviews completed. "
                "Moving forward with journey mapping and prototype planning."
            ),
            meetings=(
                MeetingFixture(
                    title="Care Team Interviews Readout",
                    date=_date("2024-02-08"),
                    time="11:30 AM PT",
                    attendees=("Priya Desai", "Sarah Kim", "Omar Greene", "Marco Silva"),
                    notes="Summarized interview insights and mapped automation candidates.",
                    decisions="Prototype should cover referral intake and triage routing.",
                    risks="Need anonymization plan for sample transcripts.",
                ),
            ),
            milestones=(
                MilestoneFixture(
                    name="Patient Journey Mapping",
                    description="Map pain points from referral to onboarding.",
                    status="IN_PROGRESS",
                    due_date=_date("2024-03-10"),
                    tasks=(
                        TaskFixture(
                            "Interview care coordinators",
                            "Capture manual steps and exception handling.",
                            "IN_PROGRESS",
                            "P1",
                            due_date=_date("2024-02-26"),
                            source_meeting_title="Care Team Interviews Readout",
                        ),
                        TaskFixture(
                            "Journey artifacts sign-off",
                            "Ensure legal approves anonymized data usage.",
                            "BACKLOG",
                            "P2",
                            owner_email="marco.silva@pmo.test",
                        ),
                    ),
                ),
                MilestoneFixture(
                    name="Automation Prototype",
                    description="Prototype triage flows in the intake assistant.",
                    status="NOT_STARTED",
                    due_date=_date("2024-04-25"),
                ),
            ),
            tasks=(
                TaskFixture(
                    "Define success metrics",
                    "Agree on CSAT, handle time, and RN coverage goals.",
                    "BACKLOG",
                    "P0",
                ),
                TaskFixture(
                    "Security questionnaire",
                    "Complete vendor diligence package.",
                    "IN_PROGRESS",
                    "P1",
                    owner_email="marco.silva@pmo.test",
                    milestone_name="Automation Prototype",
                    source_meeting_title="Care Team Interviews Readout",
                ),
            ),
            risks=(
                RiskFixture(
                    title="Transcript anonymization",
                    description="Need anonymization plan for sample transcripts.",
                    severity="HIGH",
                    source_meeting_title="Care Team Interviews Readout",
                ),
            ),
        ),
    )


def build_stages() -> tuple[StageFixture, ...]:
    return (
        StageFixture("Lead", 1, 10, "OPEN", "#6366F1"),
        StageFixture("Discovery", 2, 25, "OPEN", "#8B5CF6"),
        StageFixture("Proposal", 3, 50, "OPEN", "#A855F7"),
        StageFixture("Negotiation", 4, 75, "OPEN", "#D946EF"),
        StageFixture("Closed Won", 5, 100, "WON", "#22C55E"),
        StageFixture("Closed Lost", 6, 0, "LOST", "#EF4444"),
    )


def build_accounts() -> tuple[AccountFixture, ...]:
    # Names repeat across tenants on purpose; tenant scoping keeps them distinct.
    return (
        AccountFixture("Acme Manufacturing", ("default", "acme-corp"), "CUSTOMER", "Manufacturing", "MEDIUM", 50_000_000, 72),
        AccountFixture("TechForward Inc", ALL_TENANTS, "PROSPECT", "Technology", "LARGE", 200_000_000, 50),
        AccountFixture("Brightside Health Group", ("default",), "CUSTOMER", "Healthcare", "SMALL", 15_000_000, 85),
        AccountFixture("GreenEnergy Solutions", ("default", "acme-corp"), "PROSPECT", "Energy", "MEDIUM", 75_000_000, 60),
        AccountFixture("Velocity Logistics", ("default",), "CUSTOMER", "Logistics", "LARGE", 120_000_000, 68),
        AccountFixture("Summit Enterprises", ("acme-corp",), "CUSTOMER", "Consulting", "MEDIUM", 35_000_000, 78),
        AccountFixture("Pacific Innovations", ("global-tech",), "CUSTOMER", "Technology", "SMALL", 10_000_000, 82),
    )


def build_crm_contacts() -> tuple[CrmContactFixture, ...]:
    return (
        CrmContactFixture("John", "Smith", ALL_TENANTS, "john.smith", "Operations Director", "CUSTOMER", "REFERRAL"),
        CrmContactFixture("Sarah", "Johnson", ("default", "acme-corp"), "sarah.johnson", "VP of Sales", "SQL", "LINKEDIN"),
        CrmContactFixture("Michael", "Chen", ("default",), "michael.chen", "CTO", "CUSTOMER", "EVENT"),
        CrmContactFixture("Emma", "Williams", ("acme-corp",), "emma.williams", "Marketing Director", "MQL", "WEBSITE"),
        CrmContactFixture("David", "Lee", ("global-tech",), "david.lee", "Product Manager", "LEAD", "COLD_CALL"),
    )


def build_opportunities() -> tuple[OpportunityFixture, ...]:
    return (
        OpportunityFixture("Enterprise Deal Q1", ("default", "acme-corp"), 250_000, 50, "Proposal"),
        OpportunityFixture("Platform Modernization", ALL_TENANTS, 175_000, 75, "Negotiation"),
        OpportunityFixture("AI Integration Project", ("default",), 500_000, 25, "Discovery"),
        OpportunityFixture("Cloud Migration", ("acme-corp",), 320_000, 60, "Proposal"),
        OpportunityFixture("Security Audit", ("global-tech",), 85_000, 80, "Negotiation"),
    )


def build_labels() -> tuple[LabelFixture, ...]:
    return (
        LabelFixture("bug", "#EF4444", "Something is not working", ALL_TENANTS),
        LabelFixture("enhancement", "#3B82F6", "New feature or request", ALL_TENANTS),
        LabelFixture("mobile", "#F59E0B", "Affects mobile clients", ("default", "acme-corp")),
        LabelFixture("api", "#10B981", "Public API surface", ("acme-corp",)),
    )


def build_issues() -> tuple[IssueFixture, ...]:
    return (
        IssueFixture(
            "Login page slow on mobile",
            ("default", "acme-corp"),
            "BUG",
            "OPEN",
            "MEDIUM",
            "Login page takes over 5 seconds to load on mobile devices.",
            labels=("bug", "mobile"),
        ),
        IssueFixture(
            "Add export to CSV feature",
            ALL_TENANTS,
            "FEATURE_REQUEST",
            "TRIAGING",
            "LOW",
            "Users want to export data to CSV format.",
            labels=("enhancement",),
        ),
        IssueFixture(
            "Dashboard chart not rendering",
            ("default",),
            "BUG",
            "IN_PROGRESS",
            "HIGH",
            "Analytics chart fails to render after data update.",
            labels=("bug",),
        ),
        IssueFixture(
            "API rate limiting unclear",
            ("acme-corp",),
            "IMPROVEMENT",
            "OPEN",
            "MEDIUM",
            "Error messages for rate limiting are confusing.",
            labels=("api",),
        ),
    )


def build_leads() -> tuple[LeadFixture, ...]:
    return (
        LeadFixture("Sarah Johnson", ("default", "acme-corp"), "sarah.johnson.lead", "Potential Corp", "WEBSITE_CONTACT", "STRATEGY", "NEW"),
        LeadFixture("Robert Martinez", ALL_TENANTS, "robert.martinez", "Future Industries", "LINKEDIN", "IMPLEMENTATION", "CONTACTED"),
        LeadFixture("Lisa Wang", ("default",), "lisa.wang", "Innovation Labs", "REFERRAL", "POC", "QUALIFIED"),
        LeadFixture("James Brown", ("acme-corp",), "james.brown", "Enterprise Solutions", "EVENT", "TRAINING", "NEW"),
    )


def build_brand_profiles() -> tuple[BrandProfileFixture, ...]:
    return (
        BrandProfileFixture(
            client_name="Launchpad Consulting Partners",
            name="Launchpad Consulting Partners",
            description=(
                "A rising sun icon with radiating rays above a horizon line, paired with "
                '"LAUNCHPAD" in bold text and "CONSULTING PARTNERS" as a subtitle.'
            ),
            primary_color="#9F1239",
            secondary_color="#F97316",
            accent_color="#FCD34D",
            tone_voice_guidelines=(
                "Professional, innovative, and approachable. "
                "Emphasizes partnership and launching successful initiatives."
            ),
            key_messages=(
                "Launching success together",
                "Strategic partnerships for growth",
                "From vision to reality",
            ),
            assets=(
                BrandAssetFixture(
                    "Primary Logo (Light Background)",
                    "LOGO",
                    "Primary horizontal logo for light backgrounds",
                    ("primary", "horizontal", "light-bg"),
                ),
                BrandAssetFixture(
                    "Primary Logo (Dark Background)",
                    "LOGO",
                    "Primary horizontal logo for dark backgrounds",
                    ("primary", "horizontal", "dark-bg"),
                ),
                BrandAssetFixture(
                    "Stacked/Vertical Logo",
                    "LOGO",
                    "Stacked version of the logo for square format usage",
                    ("stacked", "vertical", "square"),
                ),
                BrandAssetFixture(
                    "Favicon Pack",
                    "IMAGE",
                    "Favicon pack with sizes from 16px to 512px",
                    ("favicon", "icon", "web"),
                ),
            ),
        ),
    )


def build_campaigns() -> tuple[CampaignFixture, ...]:
    return (
        CampaignFixture(
            name="Q1 2024 Thought Leadership",
            client_name="Launchpad Consulting Partners",
            description="Establish Launchpad as the go-to AI consulting firm through thought leadership content",
            status="ACTIVE",
            start_date=_date("2024-01-01"),
            end_date=_date("2024-03-31"),
            goals={"linkedinFollowers": 500, "websiteTraffic": 10000, "leadGeneration": 50},
            created_by_email="admin@pmo.test",
        ),
        CampaignFixture(
            name="Manufacturing AI Solutions Launch",
            client_name="Launchpad Consulting Partners",
            description="Launch campaign for predictive maintenance and industrial AI solutions",
            status="PLANNING",
            start_date=_date("2024-02-15"),
            end_date=_date("2024-05-15"),
            goals={"qualifiedLeads": 25, "demoRequests": 15, "pipelineValue": 500000},
            created_by_email="admin@pmo.test",
        ),
    )


def build_contents() -> tuple[ContentFixture, ...]:
    return (
        ContentFixture(
            name="AI Consulting Success: 60% Support Cost Reduction",
            client_name="Launchpad Consulting Partners",
            type="LINKEDIN_POST",
            channel="LINKEDIN",
            status="PUBLISHED",
            summary="Case study highlighting AI chatbot implementation results",
            content={
                "body": (
                    "Our latest case study shows how one client cut support tickets by 60% "
                    "with AI-powered automation that enhances, not replaces, human connection."
                )
            },
            tags=("case-study", "ai", "customer-success"),
            project_name="AI Strategy Roadmap",
            campaign_name="Q1 2024 Thought Leadership",
            created_by_email="admin@pmo.test",
            published_at=_date("2024-01-20"),
        ),
        ContentFixture(
            name="5 Ways AI is Revolutionizing Customer Service",
            client_name="Launchpad Consulting Partners",
            type="BLOG_POST",
            channel="WEB",
            status="PUBLISHED",
            summary="Comprehensive guide to AI in customer service",
            content={"title": "5 Ways AI is Revolutionizing Customer Service in 2024"},
            tags=("ai", "customer-service", "guide"),
            project_name="AI Strategy Roadmap",
            campaign_name="Q1 2024 Thought Leadership",
            created_by_email="admin@pmo.test",
            published_at=_date("2024-01-15"),
        ),
        ContentFixture(
            name="Manufacturing AI: Predictive Maintenance ROI",
            client_name="Launchpad Consulting Partners",
            type="LINKEDIN_POST",
            channel="LINKEDIN",
            status="READY",
            summary="ROI breakdown of a predictive maintenance rollout",
            content={"body": "Unplanned downtime costs manufacturers millions every year."},
            tags=("manufacturing", "predictive-maintenance"),
            project_name="AI Strategy Roadmap",
            campaign_name="Manufacturing AI Solutions Launch",
            created_by_email="admin@pmo.test",
        ),
        ContentFixture(
            name="Q1 2024 AI Consulting Newsletter",
            client_name="Launchpad Consulting Partners",
            type="NEWSLETTER",
            channel="EMAIL",
            status="DRAFT",
            summary="Quarterly newsletter for clients and prospects",
            content={"subject": "Your Q1 AI briefing"},
            tags=("newsletter",),
            created_by_email="admin@pmo.test",
        ),
    )


def build_tenant_projects() -> tuple[TenantProjectFixture, ...]:
    # Same names across tenants on purpose; tenant isolation keeps them apart.
    return (
        TenantProjectFixture(
            "Digital Transformation",
            ALL_TENANTS,
            "IN_PROGRESS",
            "ON_TRACK",
            "Project progressing well with key milestones on track.",
        ),
        TenantProjectFixture(
            "AI Strategy Roadmap",
            ("default", "acme-corp"),
            "IN_PROGRESS",
            "AT_RISK",
            "Some delays due to resource constraints.",
        ),
        TenantProjectFixture(
            "Process Automation", ("default",), "PLANNING", "ON_TRACK", "In planning phase, gathering requirements."
        ),
        TenantProjectFixture(
            "Data Analytics Platform", ("acme-corp",), "IN_PROGRESS", "ON_TRACK", "MVP delivered, working on phase 2."
        ),
        TenantProjectFixture(
            "Customer Portal", ("global-tech",), "PLANNING", "ON_TRACK", "Kickoff scheduled for next week."
        ),
    )


def build_tenant_tasks() -> tuple[TenantTaskFixture, ...]:
    return (
        TenantTaskFixture("Kick-off Meeting", ALL_TENANTS, "DONE", "P1"),
        TenantTaskFixture("Requirements Gathering", ALL_TENANTS, "IN_PROGRESS", "P1"),
        TenantTaskFixture("Technical Design Review", ("default", "acme-corp"), "BACKLOG", "P2"),
        TenantTaskFixture("User Testing", ("default",), "TODO", "P2"),
        TenantTaskFixture("Security Assessment", ("acme-corp",), "IN_PROGRESS", "P1"),
        TenantTaskFixture("Documentation Update", ("global-tech",), "BACKLOG", "P3"),
    )


def build_expense_categories() -> tuple[ExpenseCategoryFixture, ...]:
    # Seeded in every tenant.
    return (
        ExpenseCategoryFixture("Office Supplies", "General office supplies and equipment"),
        ExpenseCategoryFixture("Software", "Software licenses and subscriptions"),
        ExpenseCategoryFixture("Travel", "Business travel expenses"),
        ExpenseCategoryFixture("Marketing", "Marketing and advertising expenses"),
        ExpenseCategoryFixture("Infrastructure", "IT infrastructure costs"),
    )


def build_expenses() -> tuple[ExpenseFixture, ...]:
    return (
        ExpenseFixture("Office Supplies", ALL_TENANTS, 250.0, "APPROVED", "Staples"),
        ExpenseFixture("Software Licenses", ("default", "acme-corp"), 5000.0, "PENDING", "Microsoft"),
        ExpenseFixture("Travel Expenses", ("default",), 1500.0, "APPROVED", "United Airlines"),
        ExpenseFixture("Marketing Materials", ("acme-corp",), 3200.0, "PENDING", "PrintShop"),
        ExpenseFixture("Cloud Services", ("global-tech",), 8500.0, "APPROVED", "AWS"),
    )


def build_budgets() -> tuple[BudgetFixture, ...]:
    return (
        BudgetFixture("Q1 Marketing", ("default", "acme-corp"), 50_000.0, "QUARTERLY"),
        BudgetFixture("IT Infrastructure", ALL_TENANTS, 100_000.0, "ANNUAL"),
        BudgetFixture("Professional Development", ("default",), 25_000.0, "ANNUAL"),
        BudgetFixture("Research & Development", ("acme-corp",), 200_000.0, "ANNUAL"),
        BudgetFixture("Operations", ("global-tech",), 75_000.0, "QUARTERLY"),
    )


def build_recurring_costs() -> tuple[RecurringCostFixture, ...]:
    return (
        RecurringCostFixture("CRM Subscription", ("default", "acme-corp"), 500.0, "MONTHLY", "Salesforce"),
        RecurringCostFixture("Cloud Hosting", ALL_TENANTS, 2500.0, "MONTHLY", "AWS"),
        RecurringCostFixture("Security Software", ("default",), 1200.0, "ANNUAL", "CrowdStrike"),
    )


def build_ai_assets() -> tuple[AIAssetFixture, ...]:
    return (
        AIAssetFixture(
            name="Discovery Workshop Prompt Kit",
            type="PROMPT_TEMPLATE",
            description="System and user prompt templates to summarize discovery calls with clients.",
            content={
                "systemPrompt": (
                    "You are an AI project analyst. Summarize discovery notes with risks, blockers, and next actions."
                ),
                "placeholders": ["client_context", "meeting_notes", "next_steps"],
            },
            tags=("template", "prompt", "discovery"),
            is_template=True,
            created_by_email="avery.chen@pmo.test",
        ),
        AIAssetFixture(
            name="Guardrail - PHI Redaction",
            type="GUARDRAIL",
            description="Regex and policy snippets to prevent PHI leakage in chat transcripts and summaries.",
            content={"blockedPatterns": ["SSN", "MRN", "phone", "address"], "action": "mask"},
            tags=("guardrail", "compliance", "healthcare"),
            is_template=True,
            created_by_email="priya.desai@pmo.test",
        ),
        AIAssetFixture(
            name="Plant 3 Downtime Playbook",
            type="WORKFLOW",
            description="Workflow for triaging downtime anomalies on Plant 3 extrusion lines.",
            content={
                "steps": [
                    "Collect 24h historian window with pressure/temperature tags",
                    "Run anomaly notebook and attach plots",
                    "Draft Slack update using maintenance template",
                ],
                "outputs": ["notebook_link", "slack_update"],
            },
            tags=("workflow", "maintenance", "pilot"),
            client_name="Acme Manufacturing",
            project_names=("Predictive Maintenance Rollout",),
            created_by_email="avery.chen@pmo.test",
        ),
        AIAssetFixture(
            name="Intake Triage Evaluation Set",
            type="EVALUATION",
            description="Sample referral transcripts and expected routing labels for triage quality checks.",
            content={
                "examples": [
                    {"transcript": "Referral for oncology consult with urgent symptoms", "label": "urgent"},
                    {"transcript": "New patient seeking therapist with Spanish fluency", "label": "standard"},
                ]
            },
            tags=("evaluation", "routing", "healthcare"),
            client_name="Brightside Health Group",
            project_names=("AI Intake Modernization",),
            created_by_email="marco.silva@pmo.test",
        ),
    )


def build_fixtures() -> SeedFixtures:
    return SeedFixtures(
        users=build_users(),
        tenants=build_tenants(),
        clients=build_clients(),
        projects=build_projects(),
        stages=build_stages(),
        accounts=build_accounts(),
        crm_contacts=build_crm_contacts(),
        opportunities=build_opportunities(),
        labels=build_labels(),
        issues=build_issues(),
        leads=build_leads(),
        brand_profiles=build_brand_profiles(),
        campaigns=build_campaigns(),
        contents=build_contents(),
        tenant_projects=build_tenant_projects(),
        tenant_tasks=build_tenant_tasks(),
        expense_categories=build_expense_categories(),
        expenses=build_expenses(),
        budgets=build_budgets(),
        recurring_costs=build_recurring_costs(),
        ai_assets=build_ai_assets(),
    )
