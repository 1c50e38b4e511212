from __future__ import annotations

from dataclasses import replace

import bcrypt
import pytest
from sqlalchemy import func, select

from opsdeck.core.errors import SeedReferenceError
from opsdeck.domain.models import (
    Account,
    AIAsset,
    Budget,
    Client,
    CRMContact,
    Expense,
    ExpenseCategory,
    Issue,
    MarketingContent,
    Opportunity,
    Project,
    ProjectAIAsset,
    RecurringCost,
    Task,
    Tenant,
    TenantUser,
    User,
)
from opsdeck.services.seeding import build_fixtures, run_seed, verify_password


# Columns whose values must survive a re-run unchanged; each tuple starts with the natural key.
SNAPSHOT_COLUMNS = {
    User: ("email", "name", "password_hash", "role"),
    Project: ("tenant_id", "name", "client_id", "account_id", "owner_id", "status", "health_status", "end_date"),
    Task: ("project_id", "title", "owner_id", "milestone_id", "source_meeting_id", "status", "priority"),
    Opportunity: ("tenant_id", "name", "account_id", "stage_id", "owner_id", "weighted_amount"),
    Expense: ("tenant_id", "description", "category_id", "submitted_by_id", "amount", "expense_date"),
    AIAsset: ("name", "client_id", "created_by_id", "is_template", "tags"),
}


async def _count(session_factory, model) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar_one()


async def _snapshot(session_factory, model, columns) -> list[tuple]:
    async with session_factory() as session:
        rows = (await session.execute(select(*(getattr(model, column) for column in columns)))).all()
    return sorted(tuple(row) for row in rows)


@pytest.mark.asyncio
async def test_seed_is_idempotent(seed_session_factory, seed_settings) -> None:
    first = await run_seed(seed_session_factory, settings=seed_settings)
    assert first.total_created > 0
    assert first.total_updated == 0
    assert first.created["tenant"] == 3
    assert first.created["user"] == 9

    snapshots = {
        model: await _snapshot(seed_session_factory, model, columns) for model, columns in SNAPSHOT_COLUMNS.items()
    }

    second = await run_seed(seed_session_factory, settings=seed_settings)
    assert second.total_created == 0
    assert second.total_updated == first.total_created
    for model, columns in SNAPSHOT_COLUMNS.items():
        assert await _snapshot(seed_session_factory, model, columns) == snapshots[model], model.__name__


@pytest.mark.asyncio
async def test_reseed_keeps_matching_password_hashes(seed_session_factory, seed_settings) -> None:
    await run_seed(seed_session_factory, settings=seed_settings)
    async with seed_session_factory() as session:
        before = (await session.execute(select(User).filter_by(email="admin@pmo.test"))).scalar_one().password_hash

    await run_seed(seed_session_factory, settings=seed_settings)
    async with seed_session_factory() as session:
        admin = (await session.execute(select(User).filter_by(email="admin@pmo.test"))).scalar_one()

    assert admin.password_hash == before
    assert admin.role == "ADMIN"
    assert verify_password("AdminDemo123!", admin.password_hash)
    assert bcrypt.checkpw(b"AdminDemo123!", admin.password_hash.encode("utf-8"))


@pytest.mark.asyncio
async def test_tenant_scoped_rows(seed_session_factory, seed_settings) -> None:
    await run_seed(seed_session_factory, settings=seed_settings)
    async with seed_session_factory() as session:
        tenants = {row.slug: row for row in (await session.execute(select(Tenant))).scalars()}
        assert tenants["default"].name == "Launchpad Consulting Partners"

        # Shared account names resolve to one row per tenant.
        accounts = (await session.execute(select(Account).filter_by(name="TechForward Inc"))).scalars().all()
        assert {account.tenant_id for account in accounts} == {tenant.id for tenant in tenants.values()}

        owners = (await session.execute(select(TenantUser).filter_by(role="OWNER"))).scalars().all()
        assert len(owners) == 3

        contact = (
            await session.execute(select(CRMContact).filter_by(email="john.smith@acme-corp.example.com"))
        ).scalar_one()
        assert contact.tenant_id == tenants["acme-corp"].id

        opportunity = (
            await session.execute(
                select(Opportunity).filter_by(tenant_id=tenants["default"].id, name="Enterprise Deal Q1")
            )
        ).scalar_one()
        assert opportunity.weighted_amount == pytest.approx(125_000)

        issue = (
            await session.execute(
                select(Issue).filter_by(tenant_id=tenants["default"].id, title="Login page slow on mobile")
            )
        ).scalar_one()
        assert sorted(label.name for label in issue.labels) == ["bug", "mobile"]


@pytest.mark.asyncio
async def test_unresolved_reference_rolls_back_everything(seed_session_factory, seed_settings) -> None:
    fixtures = build_fixtures()
    broken = replace(fixtures.contents[0], project_name="Nonexistent Project")
    fixtures = replace(fixtures, contents=(broken, *fixtures.contents[1:]))

    with pytest.raises(SeedReferenceError) as exc_info:
        await run_seed(seed_session_factory, fixtures=fixtures, settings=seed_settings)

    assert exc_info.value.kind == "project"
    assert "Nonexistent Project" in str(exc_info.value)
    for model in (Tenant, User, Project, MarketingContent):
        assert await _count(seed_session_factory, model) == 0


@pytest.mark.asyncio
async def test_unknown_task_owner_fails(seed_session_factory, seed_settings) -> None:
    fixtures = build_fixtures()
    project = fixtures.projects[0]
    task = replace(project.tasks[0], owner_email="ghost@pmo.test")
    fixtures = replace(
        fixtures,
        projects=(replace(project, tasks=(task, *project.tasks[1:])), *fixtures.projects[1:]),
    )

    with pytest.raises(SeedReferenceError, match="ghost@pmo.test"):
        await run_seed(seed_session_factory, fixtures=fixtures, settings=seed_settings)
    assert await _count(seed_session_factory, Task) == 0


@pytest.mark.asyncio
async def test_legacy_hash_is_replaced_with_bcrypt(seed_session_factory, seed_settings) -> None:
    await run_seed(seed_session_factory, settings=seed_settings)
    async with seed_session_factory() as session:
        async with session.begin():
            admin = (await session.execute(select(User).filter_by(email="admin@pmo.test"))).scalar_one()
            admin.password_hash = "pbkdf2_sha256$1000$salt$digest"

    await run_seed(seed_session_factory, settings=seed_settings)
    async with seed_session_factory() as session:
        admin = (await session.execute(select(User).filter_by(email="admin@pmo.test"))).scalar_one()
    assert admin.password_hash.startswith("$2b$04$")
    assert bcrypt.checkpw(b"AdminDemo123!", admin.password_hash.encode("utf-8"))


@pytest.mark.asyncio
async def test_same_client_name_in_two_tenants_stays_isolated(seed_session_factory, seed_settings) -> None:
    fixtures = build_fixtures()
    acme = next(client for client in fixtures.clients if client.name == "Acme Manufacturing")
    rollout = next(project for project in fixtures.projects if project.name == "Predictive Maintenance Rollout")
    fixtures = replace(
        fixtures,
        clients=(*fixtures.clients, replace(acme, tenant_slug="acme-corp")),
        projects=(*fixtures.projects, replace(rollout, client_tenant="acme-corp")),
    )

    await run_seed(seed_session_factory, fixtures=fixtures, settings=seed_settings)

    async with seed_session_factory() as session:
        clients = (await session.execute(select(Client).filter_by(name="Acme Manufacturing"))).scalars().all()
        client_tenants = {client.id: client.tenant_id for client in clients}
        assert len(client_tenants) == 2

        projects = (await session.execute(select(Project).filter_by(name=rollout.name))).scalars().all()
        assert len(projects) == 2
        # Each project sits in the tenant of the client it belongs to.
        for project in projects:
            assert project.tenant_id == client_tenants[project.client_id]
        assert {project.tenant_id for project in projects} == set(client_tenants.values())

        default_id = (await session.execute(select(Tenant.id).filter_by(slug="default"))).scalar_one()
        playbook = (await session.execute(select(AIAsset).filter_by(name="Plant 3 Downtime Playbook"))).scalar_one()
        assert client_tenants[playbook.client_id] == default_id
        link = (await session.execute(select(ProjectAIAsset).filter_by(asset_id=playbook.id))).scalar_one()
        linked = await session.get(Project, link.project_id)
        assert linked.tenant_id == default_id


@pytest.mark.asyncio
async def test_project_reference_to_another_clients_project_fails(seed_session_factory, seed_settings) -> None:
    fixtures = build_fixtures()
    asset = next(asset for asset in fixtures.ai_assets if asset.name == "Plant 3 Downtime Playbook")
    # The project exists in the tenant but belongs to a different client.
    broken = replace(asset, project_names=("AI Intake Modernization",))
    fixtures = replace(
        fixtures,
        ai_assets=tuple(broken if item is asset else item for item in fixtures.ai_assets),
    )

    with pytest.raises(SeedReferenceError) as exc_info:
        await run_seed(seed_session_factory, fixtures=fixtures, settings=seed_settings)
    assert exc_info.value.kind == "project"
    assert await _count(seed_session_factory, AIAsset) == 0


@pytest.mark.asyncio
async def test_tenant_projects_and_tasks_share_names_across_tenants(seed_session_factory, seed_settings) -> None:
    await run_seed(seed_session_factory, settings=seed_settings)
    async with seed_session_factory() as session:
        tenants = {row.slug: row.id for row in (await session.execute(select(Tenant))).scalars()}

        transformations = (
            await session.execute(select(Project).filter_by(name="Digital Transformation"))
        ).scalars().all()
        assert {project.tenant_id for project in transformations} == set(tenants.values())
        assert all(project.client_id is None for project in transformations)
        assert all(project.account_id is not None for project in transformations)

        kickoffs = (await session.execute(select(Task).filter_by(title="Kick-off Meeting"))).scalars().all()
        assert {task.project_id for task in kickoffs} == {project.id for project in transformations}

        security = (await session.execute(select(Task).filter_by(title="Security Assessment"))).scalar_one()
        assert (await session.get(Project, security.project_id)).tenant_id == tenants["acme-corp"]

        # The default tenant's client engagement keeps its own name and values.
        roadmaps = {
            project.tenant_id: project
            for project in (await session.execute(select(Project).filter_by(name="AI Strategy Roadmap"))).scalars()
        }
        assert set(roadmaps) == {tenants["default"], tenants["acme-corp"]}
        assert roadmaps[tenants["default"]].client_id is not None
        assert roadmaps[tenants["default"]].health_status == "ON_TRACK"
        assert roadmaps[tenants["acme-corp"]].client_id is None
        assert roadmaps[tenants["acme-corp"]].health_status == "AT_RISK"


@pytest.mark.asyncio
async def test_finance_rows_use_their_own_tenants_categories(seed_session_factory, seed_settings) -> None:
    await run_seed(seed_session_factory, settings=seed_settings)
    assert await _count(seed_session_factory, ExpenseCategory) == 15
    assert await _count(seed_session_factory, Expense) == 8
    assert await _count(seed_session_factory, Budget) == 8
    assert await _count(seed_session_factory, RecurringCost) == 6

    async with seed_session_factory() as session:
        categories = {
            category.id: category
            for category in (await session.execute(select(ExpenseCategory))).scalars()
        }
        supplies = (await session.execute(select(Expense).filter_by(description="Office Supplies"))).scalars().all()
        assert len(supplies) == 3
        for expense in supplies:
            category = categories[expense.category_id]
            assert category.tenant_id == expense.tenant_id
            assert category.name == "Office Supplies"

        for budget in (await session.execute(select(Budget))).scalars():
            assert categories[budget.category_id].tenant_id == budget.tenant_id
            assert categories[budget.category_id].name == "Marketing"

        hosting = (await session.execute(select(RecurringCost).filter_by(name="Cloud Hosting"))).scalars().all()
        assert {cost.frequency for cost in hosting} == {"MONTHLY"}
        assert all(categories[cost.category_id].name == "Software" for cost in hosting)


@pytest.mark.asyncio
async def test_ai_assets_and_templates(seed_session_factory, seed_settings) -> None:
    await run_seed(seed_session_factory, settings=seed_settings)
    await run_seed(seed_session_factory, settings=seed_settings)

    async with seed_session_factory() as session:
        assets = {asset.name: asset for asset in (await session.execute(select(AIAsset))).scalars()}
        # Templates without a client are matched on re-run instead of duplicated.
        assert len(assets) == 4
        templates = [asset for asset in assets.values() if asset.is_template]
        assert {asset.name for asset in templates} == {"Discovery Workshop Prompt Kit", "Guardrail - PHI Redaction"}
        assert all(asset.client_id is None for asset in templates)

        links = (await session.execute(select(ProjectAIAsset))).scalars().all()
        assert len(links) == 2
        intake = (await session.execute(select(Project).filter_by(name="AI Intake Modernization"))).scalar_one()
        evaluation = assets["Intake Triage Evaluation Set"]
        assert any(link.project_id == intake.id and link.asset_id == evaluation.id for link in links)
