from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Hashable, Mapping

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from opsdeck.core.config import Settings, get_settings
from opsdeck.core.errors import SeedReferenceError
from opsdeck.domain.models import (
    Account,
    AIAsset,
    BrandAsset,
    BrandProfile,
    Budget,
    Campaign,
    Client,
    Contact,
    CRMContact,
    Expense,
    ExpenseCategory,
    InboundLead,
    Issue,
    IssueLabel,
    MarketingContent,
    Meeting,
    Milestone,
    Opportunity,
    Pipeline,
    PipelineStage,
    Project,
    ProjectAIAsset,
    ProjectDocument,
    ProjectRisk,
    RecurringCost,
    Task,
    Tenant,
    TenantUser,
    User,
)
from opsdeck.services.seeding.fixtures import (
    SEED_ANCHOR,
    ProjectFixture,
    SeedFixtures,
    TaskFixture,
    build_fixtures,
)
from opsdeck.services.seeding.plan import SeedPlan, SeedStep
from opsdeck.services.seeding.upsert import find_by_key, hash_password, upsert, verify_password


logger = logging.getLogger(__name__)


@dataclass
class SeedReport:
    created: dict[str, int] = field(default_factory=lambda: defaultdict(int))
    updated: dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def record(self, kind: str, created: bool) -> None:
        if created:
            self.created[kind] += 1
        else:
            self.updated[kind] += 1

    @property
    def total_created(self) -> int:
        return sum(self.created.values())

    @property
    def total_updated(self) -> int:
        return sum(self.updated.values())

    def summary(self) -> str:
        kinds = sorted(set(self.created) | set(self.updated))
        return " ".join(f"{kind}={self.created.get(kind, 0)}/{self.updated.get(kind, 0)}" for kind in kinds)


def _resolve(kind: str, mapping: Mapping[Hashable, int], key: Hashable, *, display: str, context: str | None = None) -> int:
    try:
        return mapping[key]
    except KeyError:
        raise SeedReferenceError(kind, display, context) from None


class SeedContext:
    """Natural-key to id maps built up as the seed steps run.

    Anything named inside a tenant (clients, projects, campaigns, stages,
    accounts, labels, expense categories) is keyed by tenant slug first, so
    equal names in different tenants never resolve to each other.
    """

    def __init__(self, session: AsyncSession, fixtures: SeedFixtures, *, password_rounds: int) -> None:
        self.session = session
        self.fixtures = fixtures
        self.password_rounds = password_rounds
        self.report = SeedReport()

        self.tenant_ids: dict[str, str] = {}
        self.user_ids: dict[str, int] = {}
        self.client_ids: dict[tuple[str, str], int] = {}
        self.project_ids: dict[tuple[str, str], int] = {}
        self.project_clients: dict[int, int | None] = {}
        self.meeting_ids: dict[tuple[int, str], int] = {}
        self.milestone_ids: dict[tuple[int, str], int] = {}
        self.stage_ids: dict[tuple[str, str], int] = {}
        self.account_ids: dict[tuple[str, str], int] = {}
        self.label_ids: dict[tuple[str, str], int] = {}
        self.campaign_ids: dict[tuple[str, str, str], int] = {}
        self.category_ids: dict[tuple[str, str], int] = {}

    def resolve_tenant(self, slug: str, *, context: str | None = None) -> str:
        try:
            return self.tenant_ids[slug]
        except KeyError:
            raise SeedReferenceError("tenant", slug, context) from None

    def resolve_user(self, email: str, *, context: str | None = None) -> int:
        return _resolve("user", self.user_ids, email, display=email, context=context)

    def resolve_client(self, slug: str, name: str, *, context: str | None = None) -> int:
        return _resolve("client", self.client_ids, (slug, name), display=f"{slug}::{name}", context=context)

    def resolve_project(
        self,
        slug: str,
        name: str,
        *,
        client_id: int | None = None,
        context: str | None = None,
    ) -> int:
        project_id = _resolve("project", self.project_ids, (slug, name), display=f"{slug}::{name}", context=context)
        # A client-scoped reference must land on that client's own project.
        if client_id is not None and self.project_clients.get(project_id) != client_id:
            raise SeedReferenceError("project", f"{slug}::{name}", context)
        return project_id

    def resolve_meeting(self, project_id: int, title: str, *, context: str | None = None) -> int:
        return _resolve("meeting", self.meeting_ids, (project_id, title), display=title, context=context)

    def resolve_milestone(self, project_id: int, name: str, *, context: str | None = None) -> int:
        return _resolve("milestone", self.milestone_ids, (project_id, name), display=name, context=context)

    def resolve_stage(self, slug: str, name: str, *, context: str | None = None) -> int:
        return _resolve("pipeline stage", self.stage_ids, (slug, name), display=f"{slug}::{name}", context=context)

    def resolve_account(self, slug: str, name: str, *, context: str | None = None) -> int:
        return _resolve("account", self.account_ids, (slug, name), display=f"{slug}::{name}", context=context)

    def resolve_label(self, slug: str, name: str, *, context: str | None = None) -> int:
        return _resolve("issue label", self.label_ids, (slug, name), display=f"{slug}::{name}", context=context)

    def resolve_campaign(self, slug: str, client_name: str, name: str, *, context: str | None = None) -> int:
        return _resolve(
            "campaign",
            self.campaign_ids,
            (slug, client_name, name),
            display=f"{slug}::{client_name}::{name}",
            context=context,
        )

    def resolve_category(self, slug: str, name: str, *, context: str | None = None) -> int:
        return _resolve("expense category", self.category_ids, (slug, name), display=f"{slug}::{name}", context=context)

    def tenant_owner(self, slug: str) -> int:
        # The first listed member owns tenant-scoped CRM rows.
        for tenant in self.fixtures.tenants:
            if tenant.slug == slug and tenant.members:
                return self.resolve_user(tenant.members[0].email, context=f"owner of tenant {slug}")
        raise SeedReferenceError("tenant", slug, "no members to own CRM records")

    def primary_account(self, slug: str) -> int | None:
        for account in self.fixtures.accounts:
            if slug in account.tenants:
                return self.resolve_account(slug, account.name)
        return None


async def seed_tenants(ctx: SeedContext) -> None:
    for tenant in ctx.fixtures.tenants:
        row, created = await upsert(
            ctx.session,
            Tenant,
            {"slug": tenant.slug},
            {"name": tenant.name, "plan": tenant.plan, "status": "ACTIVE"},
        )
        ctx.tenant_ids[tenant.slug] = row.id
        ctx.report.record("tenant", created)


async def seed_users(ctx: SeedContext) -> None:
    for user in ctx.fixtures.users:
        existing = await find_by_key(ctx.session, User, {"email": user.email})
        # Keep a stored hash that already matches so re-runs do not churn credentials.
        if existing is not None and verify_password(user.password, existing.password_hash):
            password_hash = existing.password_hash
        else:
            password_hash = hash_password(user.password, rounds=ctx.password_rounds)
        row, created = await upsert(
            ctx.session,
            User,
            {"email": user.email},
            {"name": user.name, "password_hash": password_hash, "timezone": user.timezone, "role": user.role},
        )
        ctx.user_ids[user.email] = row.id
        ctx.report.record("user", created)


async def seed_memberships(ctx: SeedContext) -> None:
    for tenant in ctx.fixtures.tenants:
        tenant_id = ctx.resolve_tenant(tenant.slug)
        for member in tenant.members:
            user_id = ctx.resolve_user(member.email, context=f"member of tenant {tenant.slug}")
            _, created = await upsert(
                ctx.session,
                TenantUser,
                {"tenant_id": tenant_id, "user_id": user_id},
                {"role": member.role},
            )
            ctx.report.record("tenant_user", created)


async def seed_clients(ctx: SeedContext) -> None:
    for client in ctx.fixtures.clients:
        tenant_id = ctx.resolve_tenant(client.tenant_slug, context=f"client {client.name}")
        row, created = await upsert(
            ctx.session,
            Client,
            {"tenant_id": tenant_id, "name": client.name},
            {
                "industry": client.industry,
                "company_size": client.company_size,
                "timezone": client.timezone,
                "ai_maturity": client.ai_maturity,
                "notes": client.notes,
                "archived": False,
            },
        )
        ctx.client_ids[(client.tenant_slug, client.name)] = row.id
        ctx.report.record("client", created)

        for contact in client.contacts:
            _, created = await upsert(
                ctx.session,
                Contact,
                {"client_id": row.id, "email": contact.email},
                {
                    "name": contact.name,
                    "role": contact.role,
                    "phone": contact.phone,
                    "notes": contact.notes,
                    "archived": False,
                },
            )
            ctx.report.record("contact", created)


async def _seed_task(
    ctx: SeedContext,
    project: ProjectFixture,
    project_id: int,
    task: TaskFixture,
    milestone_id: int | None,
) -> None:
    where = f"task {task.title!r} in project {project.name!r}"
    owner_id = ctx.resolve_user(task.owner_email or project.owner_email, context=where)
    if milestone_id is None and task.milestone_name:
        milestone_id = ctx.resolve_milestone(project_id, task.milestone_name, context=where)
    source_meeting_id = None
    if task.source_meeting_title:
        source_meeting_id = ctx.resolve_meeting(project_id, task.source_meeting_title, context=where)
    _, created = await upsert(
        ctx.session,
        Task,
        {"project_id": project_id, "title": task.title},
        {
            "owner_id": owner_id,
            "milestone_id": milestone_id,
            "source_meeting_id": source_meeting_id,
            "description": task.description,
            "status": task.status,
            "priority": task.priority,
            "due_date": task.due_date,
        },
    )
    ctx.report.record("task", created)


async def seed_projects(ctx: SeedContext) -> None:
    for project in ctx.fixtures.projects:
        where = f"project {project.name!r}"
        tenant_id = ctx.resolve_tenant(project.client_tenant, context=where)
        client_id = ctx.resolve_client(project.client_tenant, project.client_name, context=where)
        owner_id = ctx.resolve_user(project.owner_email, context=where)
        row, created = await upsert(
            ctx.session,
            Project,
            {"tenant_id": tenant_id, "name": project.name},
            {
                "client_id": client_id,
                "owner_id": owner_id,
                "status": project.status,
                "start_date": project.start_date,
                "end_date": project.end_date,
                "health_status": project.health_status,
                "status_summary": project.status_summary,
            },
        )
        project_id = row.id
        ctx.project_ids[(project.client_tenant, project.name)] = project_id
        ctx.project_clients[project_id] = client_id
        ctx.report.record("project", created)

        for meeting in project.meetings:
            meeting_row, created = await upsert(
                ctx.session,
                Meeting,
                {"project_id": project_id, "title": meeting.title, "date": meeting.date},
                {
                    "time": meeting.time,
                    "attendees": list(meeting.attendees),
                    "notes": meeting.notes,
                    "decisions": meeting.decisions,
                    "risks": meeting.risks,
                },
            )
            ctx.meeting_ids[(project_id, meeting.title)] = meeting_row.id
            ctx.report.record("meeting", created)

        # Every milestone exists before any task so project-level tasks can point at any of them.
        for milestone in project.milestones:
            milestone_row, created = await upsert(
                ctx.session,
                Milestone,
                {"project_id": project_id, "name": milestone.name},
                {"description": milestone.description, "status": milestone.status, "due_date": milestone.due_date},
            )
            ctx.milestone_ids[(project_id, milestone.name)] = milestone_row.id
            ctx.report.record("milestone", created)

        for milestone in project.milestones:
            milestone_id = ctx.milestone_ids[(project_id, milestone.name)]
            for task in milestone.tasks:
                await _seed_task(ctx, project, project_id, task, milestone_id)
        for task in project.tasks:
            await _seed_task(ctx, project, project_id, task, None)

        for risk in project.risks:
            source_meeting_id = None
            if risk.source_meeting_title:
                source_meeting_id = ctx.resolve_meeting(
                    project_id, risk.source_meeting_title, context=f"risk {risk.title!r}"
                )
            _, created = await upsert(
                ctx.session,
                ProjectRisk,
                {"project_id": project_id, "title": risk.title},
                {
                    "source_meeting_id": source_meeting_id,
                    "description": risk.description,
                    "severity": risk.severity,
                    "status": risk.status,
                    "suggested_mitigation": risk.suggested_mitigation,
                },
            )
            ctx.report.record("project_risk", created)

        for document in project.documents:
            _, created = await upsert(
                ctx.session,
                ProjectDocument,
                {"project_id": project_id, "name": document.name},
                {
                    "created_by_id": owner_id,
                    "type": document.type,
                    "status": document.status,
                    "content": document.content,
                },
            )
            ctx.report.record("project_document", created)


async def seed_pipelines(ctx: SeedContext) -> None:
    for tenant in ctx.fixtures.tenants:
        tenant_id = ctx.resolve_tenant(tenant.slug)
        pipeline, created = await upsert(
            ctx.session,
            Pipeline,
            {"tenant_id": tenant_id, "name": ctx.fixtures.pipeline_name},
            {"description": "Standard sales pipeline", "is_default": True},
        )
        ctx.report.record("pipeline", created)
        for stage in ctx.fixtures.stages:
            stage_row, created = await upsert(
                ctx.session,
                PipelineStage,
                {"pipeline_id": pipeline.id, "name": stage.name},
                {"order": stage.order, "probability": stage.probability, "type": stage.type, "color": stage.color},
            )
            ctx.stage_ids[(tenant.slug, stage.name)] = stage_row.id
            ctx.report.record("pipeline_stage", created)


async def seed_accounts(ctx: SeedContext) -> None:
    for account in ctx.fixtures.accounts:
        for slug in account.tenants:
            tenant_id = ctx.resolve_tenant(slug, context=f"account {account.name!r}")
            row, created = await upsert(
                ctx.session,
                Account,
                {"tenant_id": tenant_id, "name": account.name},
                {
                    "owner_id": ctx.tenant_owner(slug),
                    "type": account.type,
                    "industry": account.industry,
                    "employee_count": account.employee_count,
                    "annual_revenue": account.annual_revenue,
                    "health_score": account.health_score,
                },
            )
            ctx.account_ids[(slug, account.name)] = row.id
            ctx.report.record("account", created)


async def seed_crm_contacts(ctx: SeedContext) -> None:
    for contact in ctx.fixtures.crm_contacts:
        for slug in contact.tenants:
            tenant_id = ctx.resolve_tenant(slug, context=f"CRM contact {contact.email!r}")
            _, created = await upsert(
                ctx.session,
                CRMContact,
                {"tenant_id": tenant_id, "email": f"{contact.email}@{slug}.example.com"},
                {
                    "account_id": ctx.primary_account(slug),
                    "owner_id": ctx.tenant_owner(slug),
                    "first_name": contact.first_name,
                    "last_name": contact.last_name,
                    "job_title": contact.job_title,
                    "lifecycle": contact.lifecycle,
                    "lead_source": contact.lead_source,
                },
            )
            ctx.report.record("crm_contact", created)


async def seed_opportunities(ctx: SeedContext) -> None:
    for opportunity in ctx.fixtures.opportunities:
        for slug in opportunity.tenants:
            where = f"opportunity {opportunity.name!r}"
            tenant_id = ctx.resolve_tenant(slug, context=where)
            account_id = ctx.primary_account(slug)
            if account_id is None:
                raise SeedReferenceError("account", slug, where)
            _, created = await upsert(
                ctx.session,
                Opportunity,
                {"tenant_id": tenant_id, "name": opportunity.name},
                {
                    "account_id": account_id,
                    "stage_id": ctx.resolve_stage(slug, opportunity.stage_name, context=where),
                    "owner_id": ctx.tenant_owner(slug),
                    "amount": opportunity.amount,
                    "probability": opportunity.probability,
                    "weighted_amount": opportunity.amount * (opportunity.probability / 100),
                    "status": "OPEN",
                },
            )
            ctx.report.record("opportunity", created)


async def seed_issue_labels(ctx: SeedContext) -> None:
    for label in ctx.fixtures.labels:
        for slug in label.tenants:
            tenant_id = ctx.resolve_tenant(slug, context=f"label {label.name!r}")
            row, created = await upsert(
                ctx.session,
                IssueLabel,
                {"tenant_id": tenant_id, "name": label.name},
                {"color": label.color, "description": label.description},
            )
            ctx.label_ids[(slug, label.name)] = row.id
            ctx.report.record("issue_label", created)


async def seed_issues(ctx: SeedContext) -> None:
    for issue in ctx.fixtures.issues:
        for slug in issue.tenants:
            where = f"issue {issue.title!r}"
            tenant_id = ctx.resolve_tenant(slug, context=where)
            labels = [
                await ctx.session.get(IssueLabel, ctx.resolve_label(slug, name, context=where))
                for name in issue.labels
            ]
            _, created = await upsert(
                ctx.session,
                Issue,
                {"tenant_id": tenant_id, "title": issue.title},
                {
                    "reported_by_id": ctx.tenant_owner(slug),
                    "description": issue.description,
                    "type": issue.type,
                    "status": issue.status,
                    "priority": issue.priority,
                    "labels": labels,
                },
            )
            ctx.report.record("issue", created)


async def seed_leads(ctx: SeedContext) -> None:
    for lead in ctx.fixtures.leads:
        for slug in lead.tenants:
            tenant_id = ctx.resolve_tenant(slug, context=f"lead {lead.name!r}")
            _, created = await upsert(
                ctx.session,
                InboundLead,
                {"tenant_id": tenant_id, "email": f"{lead.email}@{slug}.example.com"},
                {
                    "name": lead.name,
                    "company": lead.company,
                    "source": lead.source,
                    "service_interest": lead.service_interest,
                    "status": lead.status,
                },
            )
            ctx.report.record("inbound_lead", created)


async def seed_brand_profiles(ctx: SeedContext) -> None:
    for profile in ctx.fixtures.brand_profiles:
        client_id = ctx.resolve_client(
            profile.client_tenant, profile.client_name, context=f"brand profile {profile.name!r}"
        )
        row, created = await upsert(
            ctx.session,
            BrandProfile,
            {"client_id": client_id},
            {
                "name": profile.name,
                "description": profile.description,
                "primary_color": profile.primary_color,
                "secondary_color": profile.secondary_color,
                "accent_color": profile.accent_color,
                "tone_voice_guidelines": profile.tone_voice_guidelines,
                "key_messages": list(profile.key_messages),
                "archived": False,
            },
        )
        ctx.report.record("brand_profile", created)
        for asset in profile.assets:
            _, created = await upsert(
                ctx.session,
                BrandAsset,
                {"brand_profile_id": row.id, "name": asset.name},
                {"type": asset.type, "description": asset.description, "tags": list(asset.tags), "archived": False},
            )
            ctx.report.record("brand_asset", created)


async def seed_campaigns(ctx: SeedContext) -> None:
    for campaign in ctx.fixtures.campaigns:
        where = f"campaign {campaign.name!r}"
        client_id = ctx.resolve_client(campaign.client_tenant, campaign.client_name, context=where)
        row, created = await upsert(
            ctx.session,
            Campaign,
            {"client_id": client_id, "name": campaign.name},
            {
                "created_by_id": ctx.resolve_user(campaign.created_by_email, context=where),
                "description": campaign.description,
                "status": campaign.status,
                "start_date": campaign.start_date,
                "end_date": campaign.end_date,
                "goals": dict(campaign.goals),
                "archived": False,
            },
        )
        ctx.campaign_ids[(campaign.client_tenant, campaign.client_name, campaign.name)] = row.id
        ctx.report.record("campaign", created)


async def seed_marketing_content(ctx: SeedContext) -> None:
    for content in ctx.fixtures.contents:
        where = f"content {content.name!r}"
        client_id = ctx.resolve_client(content.client_tenant, content.client_name, context=where)
        project_id = None
        if content.project_name:
            project_id = ctx.resolve_project(
                content.client_tenant, content.project_name, client_id=client_id, context=where
            )
        campaign_id = None
        if content.campaign_name:
            campaign_id = ctx.resolve_campaign(
                content.client_tenant, content.client_name, content.campaign_name, context=where
            )
        created_by_id = None
        if content.created_by_email:
            created_by_id = ctx.resolve_user(content.created_by_email, context=where)
        _, created = await upsert(
            ctx.session,
            MarketingContent,
            {"client_id": client_id, "name": content.name},
            {
                "project_id": project_id,
                "campaign_id": campaign_id,
                "created_by_id": created_by_id,
                "type": content.type,
                "channel": content.channel,
                "status": content.status,
                "summary": content.summary,
                "content": dict(content.content),
                "tags": list(content.tags),
                "published_at": content.published_at,
                "archived": False,
            },
        )
        ctx.report.record("marketing_content", created)


async def seed_tenant_projects(ctx: SeedContext) -> None:
    for project in ctx.fixtures.tenant_projects:
        for slug in project.tenants:
            if (slug, project.name) in ctx.project_ids:
                # A client engagement already owns this name in the tenant; reuse it untouched.
                logger.debug("seed_tenant_project_reused tenant=%s project=%s", slug, project.name)
                continue
            tenant_id = ctx.resolve_tenant(slug, context=f"project {project.name!r}")
            row, created = await upsert(
                ctx.session,
                Project,
                {"tenant_id": tenant_id, "name": project.name},
                {
                    "client_id": None,
                    "account_id": ctx.primary_account(slug),
                    "owner_id": ctx.tenant_owner(slug),
                    "status": project.status,
                    "health_status": project.health_status,
                    "status_summary": project.status_summary,
                    "start_date": SEED_ANCHOR,
                    "end_date": SEED_ANCHOR + timedelta(days=180),
                },
            )
            ctx.project_ids[(slug, project.name)] = row.id
            ctx.project_clients[row.id] = None
            ctx.report.record("project", created)


async def seed_tenant_tasks(ctx: SeedContext) -> None:
    for task in ctx.fixtures.tenant_tasks:
        for slug in task.tenants:
            where = f"task {task.title!r}"
            project_id = ctx.resolve_project(slug, task.project_name, context=where)
            _, created = await upsert(
                ctx.session,
                Task,
                {"project_id": project_id, "title": task.title},
                {
                    "owner_id": ctx.tenant_owner(slug),
                    "description": f"UAT test task: {task.title}",
                    "status": task.status,
                    "priority": task.priority,
                },
            )
            ctx.report.record("task", created)


async def seed_expense_categories(ctx: SeedContext) -> None:
    for tenant in ctx.fixtures.tenants:
        tenant_id = ctx.resolve_tenant(tenant.slug)
        for category in ctx.fixtures.expense_categories:
            row, created = await upsert(
                ctx.session,
                ExpenseCategory,
                {"tenant_id": tenant_id, "name": category.name},
                {"description": category.description},
            )
            ctx.category_ids[(tenant.slug, category.name)] = row.id
            ctx.report.record("expense_category", created)


async def seed_expenses(ctx: SeedContext) -> None:
    for expense in ctx.fixtures.expenses:
        for slug in expense.tenants:
            where = f"expense {expense.description!r}"
            _, created = await upsert(
                ctx.session,
                Expense,
                {"tenant_id": ctx.resolve_tenant(slug, context=where), "description": expense.description},
                {
                    "category_id": ctx.resolve_category(slug, expense.category_name, context=where),
                    "submitted_by_id": ctx.tenant_owner(slug),
                    "amount": expense.amount,
                    "status": expense.status,
                    "vendor": expense.vendor,
                    "expense_date": SEED_ANCHOR,
                },
            )
            ctx.report.record("expense", created)


async def seed_budgets(ctx: SeedContext) -> None:
    for budget in ctx.fixtures.budgets:
        for slug in budget.tenants:
            where = f"budget {budget.name!r}"
            _, created = await upsert(
                ctx.session,
                Budget,
                {"tenant_id": ctx.resolve_tenant(slug, context=where), "name": budget.name},
                {
                    "category_id": ctx.resolve_category(slug, budget.category_name, context=where),
                    "created_by_id": ctx.tenant_owner(slug),
                    "amount": budget.amount,
                    "period": budget.period,
                    "start_date": SEED_ANCHOR,
                    "end_date": SEED_ANCHOR + timedelta(days=365),
                },
            )
            ctx.report.record("budget", created)


async def seed_recurring_costs(ctx: SeedContext) -> None:
    for cost in ctx.fixtures.recurring_costs:
        for slug in cost.tenants:
            where = f"recurring cost {cost.name!r}"
            _, created = await upsert(
                ctx.session,
                RecurringCost,
                {"tenant_id": ctx.resolve_tenant(slug, context=where), "name": cost.name},
                {
                    "category_id": ctx.resolve_category(slug, cost.category_name, context=where),
                    "created_by_id": ctx.tenant_owner(slug),
                    "amount": cost.amount,
                    "frequency": cost.frequency,
                    "vendor": cost.vendor,
                    "start_date": SEED_ANCHOR,
                    "next_due_date": SEED_ANCHOR + timedelta(days=30),
                },
            )
            ctx.report.record("recurring_cost", created)


async def seed_ai_assets(ctx: SeedContext) -> None:
    for asset in ctx.fixtures.ai_assets:
        where = f"AI asset {asset.name!r}"
        client_id = None
        if asset.client_name:
            client_id = ctx.resolve_client(asset.client_tenant, asset.client_name, context=where)
        created_by_id = None
        if asset.created_by_email:
            created_by_id = ctx.resolve_user(asset.created_by_email, context=where)
        # Templates match on client_id IS NULL.
        row, created = await upsert(
            ctx.session,
            AIAsset,
            {"name": asset.name, "client_id": client_id},
            {
                "created_by_id": created_by_id,
                "type": asset.type,
                "description": asset.description,
                "content": dict(asset.content),
                "tags": list(asset.tags),
                "is_template": asset.is_template,
            },
        )
        ctx.report.record("ai_asset", created)
        for project_name in asset.project_names:
            project_id = ctx.resolve_project(asset.client_tenant, project_name, client_id=client_id, context=where)
            _, created = await upsert(
                ctx.session,
                ProjectAIAsset,
                {"project_id": project_id, "asset_id": row.id},
                {"notes": None},
            )
            ctx.report.record("project_ai_asset", created)


def build_seed_plan() -> SeedPlan:
    return SeedPlan(
        [
            SeedStep("tenants", seed_tenants),
            SeedStep("users", seed_users),
            SeedStep("memberships", seed_memberships, ("tenants", "users")),
            SeedStep("clients", seed_clients, ("tenants",)),
            SeedStep("projects", seed_projects, ("clients", "users")),
            SeedStep("pipelines", seed_pipelines, ("tenants",)),
            SeedStep("accounts", seed_accounts, ("tenants", "users")),
            SeedStep("crm_contacts", seed_crm_contacts, ("accounts",)),
            SeedStep("opportunities", seed_opportunities, ("accounts", "pipelines")),
            SeedStep("issue_labels", seed_issue_labels, ("tenants",)),
            SeedStep("issues", seed_issues, ("issue_labels", "users")),
            SeedStep("leads", seed_leads, ("tenants",)),
            SeedStep("brand_profiles", seed_brand_profiles, ("clients",)),
            SeedStep("campaigns", seed_campaigns, ("clients", "users")),
            SeedStep("tenant_projects", seed_tenant_projects, ("projects", "accounts")),
            SeedStep("tenant_tasks", seed_tenant_tasks, ("tenant_projects",)),
            SeedStep("expense_categories", seed_expense_categories, ("tenants",)),
            SeedStep("expenses", seed_expenses, ("expense_categories", "users")),
            SeedStep("budgets", seed_budgets, ("expense_categories", "users")),
            SeedStep("recurring_costs", seed_recurring_costs, ("expense_categories", "users")),
            SeedStep("ai_assets", seed_ai_assets, ("projects", "users")),
            SeedStep("marketing_content", seed_marketing_content, ("campaigns", "projects")),
        ]
    )


async def run_seed(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    fixtures: SeedFixtures | None = None,
    plan: SeedPlan | None = None,
    settings: Settings | None = None,
) -> SeedReport:
    """Run the full seed plan in one transaction.

    Any error, including an unresolved fixture reference, rolls the whole run
    back and propagates to the caller.
    """
    settings = settings or get_settings()
    fixtures = fixtures or build_fixtures()
    plan = plan or build_seed_plan()
    async with session_factory() as session:
        async with session.begin():
            context = SeedContext(session, fixtures, password_rounds=settings.bcrypt_salt_rounds)
            await plan.run(context)
    logger.info(
        "seed_complete created=%s updated=%s detail=%s",
        context.report.total_created,
        context.report.total_updated,
        context.report.summary(),
    )
    return context.report
