"""Tests for the truck lifecycle and stock reconciliation."""

from __future__ import annotations

import pytest
from sqlalchemy import select

from sodipas_api.errors import Forbidden, InvalidStatus, NotFound, ValidationError
from sodipas_api.models.logistics import Stock
from sodipas_api.models.records import AuditLog, Notification
from sodipas_api.schemas import ArticleIn, TruckCreate, UnloadItem
from sodipas_api.services.truck_service import TruckService


def _payload(hangar="Hangar 1", articles=None, **overrides) -> TruckCreate:
    fields = dict(
        origin="Ziguinchor",
        driver="Ibrahima Faye",
        phone="+221771234567",
        hangar=hangar,
        articles=articles
        if articles is not None
        else [ArticleIn(name="Mangue", quantity=100, unit="cageots", unit_price=500)],
    )
    fields.update(overrides)
    return TruckCreate(**fields)


@pytest.fixture
def service(db_session, clock):
    return TruckService(db_session, clock=clock)


async def _stocks(db_session) -> list[Stock]:
    return list((await db_session.execute(select(Stock))).scalars())


# ──────────────────────────────────────────────────────────
# Registration
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_registration_creates_stock_row(users, service, db_session, clock):
    truck = await service.register_truck(users["manager"], _payload())

    assert truck.status == "registered"
    assert truck.registered_by == "Moussa Diop"
    assert truck.registered_at == clock()
    assert truck.arrived_at is None and truck.unloaded_at is None
    assert truck.articles == [
        {"name": "Mangue", "quantity": 100, "unit": "cageots", "unitPrice": 500}
    ]

    [stock] = await _stocks(db_session)
    assert (stock.name, stock.hangar) == ("Mangue", "Hangar 1")
    assert stock.quantity == 100
    assert stock.total_value == 50000
    assert stock.unit == "cageots"
    assert stock.origin == "Ziguinchor"
    assert stock.supplier == "Ibrahima Faye"
    assert stock.last_truck_id == truck.id


@pytest.mark.asyncio
async def test_second_truck_aggregates_into_the_same_row(users, service, db_session):
    await service.register_truck(users["manager"], _payload())
    second = await service.register_truck(
        users["admin"],
        _payload(articles=[ArticleIn(name="Mangue", quantity=50, unit_price=500)]),
    )

    [stock] = await _stocks(db_session)
    assert stock.quantity == 150
    assert stock.total_value == 75000
    assert stock.unit_price == 500
    assert stock.last_truck_id == second.id


@pytest.mark.asyncio
async def test_same_article_in_another_hangar_gets_its_own_row(users, service, db_session):
    await service.register_truck(users["admin"], _payload())
    await service.register_truck(users["admin"], _payload(hangar="Hangar 2"))

    rows = {(s.name, s.hangar): s.quantity for s in await _stocks(db_session)}
    assert rows == {("Mangue", "Hangar 1"): 100, ("Mangue", "Hangar 2"): 100}


@pytest.mark.asyncio
async def test_registration_requires_every_field(users, service):
    with pytest.raises(ValidationError) as exc_info:
        await service.register_truck(
            users["admin"], _payload(driver=" ", phone=None, articles=[])
        )
    assert "driver" in exc_info.value.message
    assert "phone" in exc_info.value.message
    assert "articles" in exc_info.value.message


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["viewer", "cashier"])
async def test_registration_is_for_admins_and_managers(users, service, role):
    with pytest.raises(Forbidden):
        await service.register_truck(users[role], _payload())


@pytest.mark.asyncio
async def test_registration_is_announced_and_audited(users, service, db_session):
    await service.register_truck(users["manager"], _payload())

    notifications = (await db_session.execute(select(Notification))).scalars().all()
    audit = (await db_session.execute(select(AuditLog))).scalars().all()
    assert [n.type for n in notifications] == ["truck_registered"]
    assert [(a.action, a.user_name) for a in audit] == [("CREATE_TRUCK", "Moussa Diop")]


# ──────────────────────────────────────────────────────────
# Status transitions
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_arrival_stamps_arrived_at(users, service, clock):
    truck = await service.register_truck(users["manager"], _payload())
    clock.advance(hours=6)

    truck = await service.set_status(users["manager"], truck.id, "arrived")

    assert truck.status == "arrived"
    assert truck.arrived_at == clock()
    assert truck.unloaded_at is None


@pytest.mark.asyncio
async def test_status_can_jump_straight_to_unloaded(users, service, clock):
    truck = await service.register_truck(users["manager"], _payload())
    truck = await service.set_status(users["manager"], truck.id, "unloaded")

    assert truck.unloaded_at == clock()
    assert truck.arrived_at is None


@pytest.mark.asyncio
async def test_unknown_status(users, service):
    truck = await service.register_truck(users["manager"], _payload())
    with pytest.raises(InvalidStatus):
        await service.set_status(users["manager"], truck.id, "lost")


@pytest.mark.asyncio
async def test_status_never_moves_backwards(users, service):
    truck = await service.register_truck(users["manager"], _payload())
    await service.set_status(users["manager"], truck.id, "unloading")

    with pytest.raises(InvalidStatus):
        await service.set_status(users["manager"], truck.id, "arrived")


@pytest.mark.asyncio
async def test_status_of_missing_truck(users, service):
    with pytest.raises(NotFound):
        await service.set_status(users["admin"], "missing", "arrived")


@pytest.mark.asyncio
async def test_status_change_needs_operator_role(users, service):
    truck = await service.register_truck(users["manager"], _payload())
    with pytest.raises(Forbidden):
        await service.set_status(users["viewer"], truck.id, "arrived")


# ──────────────────────────────────────────────────────────
# Unloading
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_unload_updates_and_creates_stock(users, service, db_session, clock):
    truck = await service.register_truck(users["manager"], _payload())
    clock.advance(hours=8)

    truck, deltas = await service.unload_truck(
        users["manager"],
        truck.id,
        [
            UnloadItem(name="Mangue", quantity=20),
            UnloadItem(name="Orange", quantity=30, unit="sacs", unit_price=1000),
        ],
    )

    assert truck.status == "unloaded"
    assert truck.unloaded_at == clock()
    assert truck.unloaded_by == "Moussa Diop"

    by_name = {d.stock.name: d for d in deltas}
    assert by_name["Mangue"].action == "updated"
    assert by_name["Mangue"].stock.quantity == 120
    # price taken from the truck's declared article
    assert by_name["Mangue"].stock.total_value == 60000

    orange = by_name["Orange"]
    assert orange.action == "created"
    assert orange.quantity_added == 30
    assert orange.stock.threshold == 50
    assert orange.stock.unit == "sacs"
    assert orange.stock.total_value == 30000
    assert orange.stock.hangar == "Hangar 1"


@pytest.mark.asyncio
async def test_unload_explicit_value_wins(users, service):
    truck = await service.register_truck(users["manager"], _payload())

    _, [delta] = await service.unload_truck(
        users["manager"], truck.id, [UnloadItem(name="Mangue", quantity=10, value=2000)]
    )
    assert delta.stock.total_value == 52000
    assert delta.stock.quantity == 110


@pytest.mark.asyncio
async def test_unload_unknown_article_without_price_has_zero_value(users, service):
    truck = await service.register_truck(users["manager"], _payload())

    _, [delta] = await service.unload_truck(
        users["manager"], truck.id, [UnloadItem(name="Papaye", quantity=5)]
    )
    assert delta.action == "created"
    assert delta.stock.total_value == 0
    assert delta.stock.unit == "unit"


@pytest.mark.asyncio
async def test_unload_of_already_unloaded_truck_still_succeeds(users, service):
    truck = await service.register_truck(users["manager"], _payload())
    await service.unload_truck(users["manager"], truck.id, [UnloadItem(name="Mangue", quantity=1)])

    truck, [delta] = await service.unload_truck(
        users["admin"], truck.id, [UnloadItem(name="Mangue", quantity=1)]
    )
    assert truck.status == "unloaded"
    assert truck.unloaded_by == "Admin SODIPAS"
    assert delta.stock.quantity == 102


@pytest.mark.asyncio
async def test_unload_rejects_malformed_items(users, service):
    truck = await service.register_truck(users["manager"], _payload())
    with pytest.raises(ValidationError):
        await service.unload_truck(users["manager"], truck.id, None)
    with pytest.raises(ValidationError):
        await service.unload_truck(users["manager"], truck.id, "Mangue")


@pytest.mark.asyncio
async def test_unload_missing_truck(users, service):
    with pytest.raises(NotFound):
        await service.unload_truck(users["admin"], "missing", [])


@pytest.mark.asyncio
async def test_unload_is_announced_and_audited(users, service, db_session):
    truck = await service.register_truck(users["manager"], _payload())
    await service.unload_truck(users["manager"], truck.id, [])

    types = set((await db_session.execute(select(Notification.type))).scalars())
    actions = set((await db_session.execute(select(AuditLog.action))).scalars())
    assert "truck_unloaded" in types
    assert "UNLOAD_TRUCK" in actions


# ──────────────────────────────────────────────────────────
# Listing
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_listing_is_scoped_to_the_users_hangar(users, service):
    await service.register_truck(users["admin"], _payload(hangar="Hangar 1"))
    other = await service.register_truck(users["admin"], _payload(hangar="Hangar 2"))

    assert {t.hangar for t in await service.list_trucks(users["manager2"])} == {"Hangar 2"}
    assert len(await service.list_trucks(users["admin"])) == 2
    assert len(await service.list_trucks(users["viewer"])) == 2

    with pytest.raises(NotFound):
        await service.get_truck(users["manager"], other.id)
    assert (await service.get_truck(users["manager2"], other.id)).id == other.id


@pytest.mark.asyncio
async def test_trucks_of_another_hangar_cannot_be_changed(users, service, db_session):
    truck = await service.register_truck(users["admin"], _payload(hangar="Hangar 1"))

    with pytest.raises(NotFound):
        await service.set_status(users["manager2"], truck.id, "arrived")
    with pytest.raises(NotFound):
        await service.unload_truck(
            users["manager2"], truck.id, [UnloadItem(name="Mangue", quantity=10)]
        )

    assert truck.status == "registered"
    [stock] = await _stocks(db_session)
    assert stock.quantity == 100
