"""Tests for loading sample data."""

import pytest

from teamledger.repositories.member_repo import MemberRepository
from teamledger.repositories.product_repo import ProductRepository
from teamledger.services.demo_data import DemoDataService


@pytest.mark.asyncio
class TestDemoData:
    async def test_load_adds_members_and_products(self, test_db):
        result = await DemoDataService(test_db).load()

        assert result.members_created == 3
        assert result.products_created == 3
        products = {p.name: p.unit_price_cents for p in await ProductRepository(test_db).list_products()}
        assert products["Racing Jacket"] == 40000

    async def test_second_load_adds_nothing(self, test_db, member):
        service = DemoDataService(test_db)
        await service.load()

        again = await service.load()

        assert again.members_created == 0
        assert again.products_created == 0
        assert len(await MemberRepository(test_db).list_members()) == 4
