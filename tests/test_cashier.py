"""Tests for the cash desk: transactions, balance and closures."""

from __future__ import annotations

import pytest

from sodipas_api.models.records import CashTransaction
from sodipas_api.services.cashier_service import summarize


def test_summarize_splits_inflows_and_outflows():
    totals = summarize(
        [
            CashTransaction(type="sale", amount=10000),
            CashTransaction(type="payment", amount=2500),
            CashTransaction(type="expense", amount=4000),
        ]
    )
    assert totals.total_in == 12500
    assert totals.total_out == 4000
    assert totals.balance == 8500
    assert totals.transaction_count == 3


@pytest.mark.asyncio
async def test_day_closure(users, client, auth_headers):
    cashier = await auth_headers(users["cashier"])

    for tx in (
        {"type": "sale", "amount": 15000, "description": "Mangue x30"},
        {"type": "expense", "amount": 3000, "description": "Carburant"},
    ):
        resp = await client.post("/cashier/transactions", json=tx, headers=cashier)
        assert resp.status_code == 201
        assert resp.json()["hangar"] == "Hangar 1"

    balance = (await client.get("/cashier/balance", headers=cashier)).json()
    assert balance == {"totalIn": 15000, "totalOut": 3000, "balance": 12000, "transactionCount": 2}

    resp = await client.post("/cashier/closures", headers=cashier)
    assert resp.status_code == 201
    closure = resp.json()
    assert closure["balance"] == 12000
    assert closure["cashierName"] == "Awa Ndiaye"

    balance = (await client.get("/cashier/balance", headers=cashier)).json()
    assert balance["transactionCount"] == 0

    txs = (await client.get("/cashier/transactions", headers=cashier)).json()
    assert {t["closureId"] for t in txs} == {closure["id"]}
    assert len((await client.get("/cashier/closures", headers=cashier)).json()) == 1

    admin = await auth_headers(users["admin"])
    notes = (await client.get("/notifications", headers=admin)).json()
    assert [n["type"] for n in notes] == ["cash_closure"]


@pytest.mark.asyncio
async def test_closing_an_empty_day_is_rejected(users, client, auth_headers):
    cashier = await auth_headers(users["cashier"])
    resp = await client.post("/cashier/closures", headers=cashier)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_cash_desk_is_for_cashiers(users, client, auth_headers):
    manager = await auth_headers(users["manager"])
    resp = await client.post(
        "/cashier/transactions", json={"type": "sale", "amount": 100}, headers=manager
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_transaction_amount_must_be_positive(users, client, auth_headers):
    cashier = await auth_headers(users["cashier"])
    resp = await client.post(
        "/cashier/transactions", json={"type": "sale", "amount": 0}, headers=cashier
    )
    assert resp.status_code == 400
    resp = await client.post(
        "/cashier/transactions", json={"type": "refund", "amount": 10}, headers=cashier
    )
    assert resp.status_code == 400
