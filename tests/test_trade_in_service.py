"""Database tests for trade-in pricing, cart discounts and leads."""

import pytest

from storefront_api.models import TradeInRequest
from storefront_api.services import trade_in
from storefront_api.services.errors import NotFoundError, ValidationFailedError

PRODUCT = {
    "id": "prod_16",
    "handle": "iphone-16-pro",
    "title": "iPhone 16 Pro",
    "metadata": {"trade_in_eligible": True},
}


@pytest.fixture
def platform(commerce):
    commerce.products["prod_16"] = PRODUCT
    commerce.products["prod_case"] = {"id": "prod_case", "handle": "case", "title": "Case", "metadata": {}}
    commerce.carts["cart_1"] = {"id": "cart_1", "metadata": {"source": "web"}}
    return commerce


@pytest.fixture
async def offers(session):
    await trade_in.create_offer(session, {"model_keyword": "iphone", "condition": "good", "amount": 300000})
    await trade_in.create_offer(session, {"model_keyword": "iphone 13", "condition": "good", "amount": 650000})
    await trade_in.create_offer(session, {"model_keyword": "iphone 13", "condition": "fair", "amount": 400000})
    await trade_in.create_device_map(session, {"tac_prefix": "35671081", "model_keyword": "iphone 13 pro"})


class TestResolveModelKeyword:
    @pytest.mark.asyncio
    async def test_typed_model_wins(self, session, offers):
        assert await trade_in.resolve_model_keyword(session, " iPhone 12 ", "356710811234567") == (
            "iPhone 12",
            "old_device_model",
        )

    @pytest.mark.asyncio
    async def test_tac_lookup(self, session, offers):
        assert await trade_in.resolve_model_keyword(session, None, "356710811234567") == ("iphone 13 pro", "tac")

    @pytest.mark.asyncio
    async def test_falls_back_to_serial(self, session, offers):
        assert await trade_in.resolve_model_keyword(session, "", "F2LXK0ABCD") == ("F2LXK0ABCD", "serial")
        assert await trade_in.resolve_model_keyword(session, None, "") == ("", "serial")


class TestEstimate:
    @pytest.mark.asyncio
    async def test_matches_most_specific_offer(self, session, offers, platform):
        result = await trade_in.estimate(
            session,
            new_product_id="prod_16",
            old_device_condition="good",
            serial_number="356710811234567",
        )
        assert result == {"estimated_amount": 650000, "currency_code": "mnt", "matched": True}

    @pytest.mark.asyncio
    async def test_condition_changes_price(self, session, offers, platform):
        result = await trade_in.estimate(
            session,
            new_product_id="prod_16",
            old_device_condition="FAIR",
            serial_number="x",
            old_device_model="iPhone 13 mini",
        )
        assert result["estimated_amount"] == 400000

    @pytest.mark.asyncio
    async def test_failed_checks_return_zero(self, session, offers, platform):
        result = await trade_in.estimate(
            session,
            new_product_id="prod_16",
            old_device_condition="good",
            serial_number="356710811234567",
            device_checks={"power_on": True, "face_id_touch_ok": False},
        )
        assert result["matched"] is False
        assert result["estimated_amount"] == 0
        assert result["reason"] == trade_in.REASON_CHECKS_FAILED
        assert result["failed_checks"] == ["face_id_touch_ok"]

    @pytest.mark.asyncio
    async def test_no_offer(self, session, offers, platform):
        result = await trade_in.estimate(
            session,
            new_product_id="prod_16",
            old_device_condition="broken",
            serial_number="x",
            old_device_model="iPhone 13",
        )
        assert result == {"estimated_amount": 0, "currency_code": "mnt", "matched": False}

    @pytest.mark.asyncio
    async def test_ineligible_product(self, session, offers, platform):
        with pytest.raises(ValidationFailedError, match="not eligible"):
            await trade_in.estimate(
                session,
                new_product_id="prod_case",
                old_device_condition="good",
                serial_number="x",
            )

    @pytest.mark.asyncio
    async def test_unknown_product(self, session, offers, platform):
        with pytest.raises(NotFoundError):
            await trade_in.estimate(
                session,
                new_product_id="prod_missing",
                old_device_condition="good",
                serial_number="x",
            )


class TestApplyAndRemove:
    @pytest.mark.asyncio
    async def test_apply_creates_promotion_and_request(self, session, offers, platform):
        result = await trade_in.apply(
            session,
            cart_id="cart_1",
            new_product_id="prod_16",
            old_device_condition="good",
            serial_number="356710811234567",
        )

        assert result["applied"] is True
        assert result["estimated_amount"] == 650000
        promo_code = result["promotion_code"]
        assert promo_code.startswith("TRADEIN-")

        promotion = platform.promotions[0]
        assert promotion["code"] == promo_code
        assert promotion["limit"] == 1
        assert promotion["application_method"]["value"] == 650000
        assert promotion["application_method"]["type"] == "fixed"

        metadata = platform.carts["cart_1"]["metadata"]
        assert metadata["source"] == "web"
        assert metadata["trade_in_promo_code"] == promo_code
        assert metadata["trade_in_request_id"] == result["trade_in_request_id"]
        assert metadata["trade_in_serial_number"] == "356710811234567"

        request = await session.get(TradeInRequest, result["trade_in_request_id"])
        assert request.status == "applied"
        assert request.cart_id == "cart_1"
        assert request.old_device_model == "iphone 13 pro"
        assert request.new_product_handle == "iphone-16-pro"
        assert request.metadata_["resolved_from"] == "tac"

    @pytest.mark.asyncio
    async def test_reapply_replaces_previous_promo(self, session, offers, platform):
        kwargs = dict(cart_id="cart_1", new_product_id="prod_16", old_device_condition="good", serial_number="x")
        first = await trade_in.apply(session, old_device_model="iPhone 13", **kwargs)
        second = await trade_in.apply(session, old_device_model="iPhone 11", **kwargs)

        codes = [p["code"] for p in platform.carts["cart_1"]["promotions"]]
        assert codes == [second["promotion_code"]]
        assert first["promotion_code"] != second["promotion_code"]
        assert second["estimated_amount"] == 300000

    @pytest.mark.asyncio
    async def test_apply_without_match_leaves_cart_alone(self, session, offers, platform):
        result = await trade_in.apply(
            session,
            cart_id="cart_1",
            new_product_id="prod_16",
            old_device_condition="good",
            serial_number="x",
            old_device_model="Galaxy S22",
        )
        assert result == {"applied": False, "reason": trade_in.REASON_NO_OFFER}
        assert platform.promotions == []
        assert "update_cart" not in platform.calls

    @pytest.mark.asyncio
    async def test_apply_with_failed_checks(self, session, offers, platform):
        result = await trade_in.apply(
            session,
            cart_id="cart_1",
            new_product_id="prod_16",
            old_device_condition="good",
            serial_number="x",
            old_device_model="iPhone 13",
            device_checks={"power_on": False},
        )
        assert result == {"applied": False, "reason": trade_in.REASON_CHECKS_FAILED, "failed_checks": ["power_on"]}

    @pytest.mark.asyncio
    async def test_remove_clears_cart_and_marks_request(self, session, offers, platform):
        applied = await trade_in.apply(
            session,
            cart_id="cart_1",
            new_product_id="prod_16",
            old_device_condition="good",
            serial_number="x",
            old_device_model="iPhone 13",
        )

        result = await trade_in.remove(session, "cart_1")

        assert result["removed"] is True
        metadata = platform.carts["cart_1"]["metadata"]
        for key in trade_in.CART_METADATA_KEYS:
            assert metadata[key] is None
        assert platform.carts["cart_1"]["promotions"] == []
        request = await session.get(TradeInRequest, applied["trade_in_request_id"])
        assert request.status == "removed"

    @pytest.mark.asyncio
    async def test_remove_tolerates_promo_removal_failure(self, session, platform):
        platform.carts["cart_1"]["metadata"]["trade_in_promo_code"] = "TRADEIN-OLD"
        platform.fail.add("remove_promotions")

        result = await trade_in.remove(session, "cart_1")

        assert result["removed"] is True
        assert platform.carts["cart_1"]["metadata"]["trade_in_promo_code"] is None


class TestLeadForm:
    @pytest.mark.asyncio
    async def test_create_request(self, session):
        request = await trade_in.create_request(
            session,
            customer_name=" Bat ",
            phone="99112233",
            old_device_model="iPhone 12",
            old_device_condition="good",
            note="  ",
            new_product_handle="iphone-16-pro",
        )
        assert request.status == "new"
        assert request.customer_name == "Bat"
        assert request.note is None
        assert request.currency_code == "mnt"

    @pytest.mark.asyncio
    async def test_missing_phone(self, session):
        with pytest.raises(ValidationFailedError, match="Утасны дугаар"):
            await trade_in.create_request(
                session,
                customer_name="Bat",
                phone=" ",
                old_device_model="iPhone 12",
                old_device_condition="good",
                new_product_handle="iphone-16-pro",
            )

    @pytest.mark.asyncio
    async def test_non_apple_product_rejected(self, session):
        with pytest.raises(ValidationFailedError, match="Apple"):
            await trade_in.create_request(
                session,
                customer_name="Bat",
                phone="99112233",
                old_device_model="iPhone 12",
                old_device_condition="good",
                new_product_handle="galaxy-s24",
                new_product_title="Galaxy S24",
            )


@pytest.mark.asyncio
async def test_link_order(session):
    request = TradeInRequest(old_device_model="iPhone 12", old_device_condition="good", status="applied")
    session.add(request)
    await session.flush()

    linked = await trade_in.link_order(session, "order_1", {"metadata": {"trade_in_request_id": request.id}})
    assert linked is request
    assert request.order_id == "order_1"
    assert request.status == "ordered"

    assert await trade_in.link_order(session, "order_2", {"metadata": {}}) is None
    assert await trade_in.link_order(session, "order_3", {"metadata": {"trade_in_request_id": "tireq_x"}}) is None


class TestAdmin:
    @pytest.mark.asyncio
    async def test_create_offer_validation(self, session):
        with pytest.raises(ValidationFailedError):
            await trade_in.create_offer(session, {"model_keyword": "iphone", "condition": "good", "amount": "100"})
        with pytest.raises(ValidationFailedError, match="Invalid condition"):
            await trade_in.create_offer(session, {"model_keyword": "iphone", "condition": "mint", "amount": 1})

    @pytest.mark.asyncio
    async def test_deleted_offers_are_not_listed_or_matched(self, session, offers):
        listed = await trade_in.list_offers(session)
        assert len(listed) == 3

        target = next(o for o in listed if o.model_keyword == "iphone 13" and o.condition == "good")
        await trade_in.delete_offer(session, target.id)

        assert len(await trade_in.list_offers(session)) == 2
        matches = await trade_in.list_matching_offers(session, "good")
        assert [o.model_keyword for o in matches] == ["iphone"]
        with pytest.raises(NotFoundError):
            await trade_in.delete_offer(session, target.id)

    @pytest.mark.asyncio
    async def test_device_map_filter(self, session, offers):
        await trade_in.create_device_map(session, {"tac_prefix": "35881501", "model_keyword": "iphone 14 pro"})
        rows = await trade_in.list_device_map(session, tac_prefix="35881501")
        assert [r.model_keyword for r in rows] == ["iphone 14 pro"]
        assert len(await trade_in.list_device_map(session)) == 2

        with pytest.raises(ValidationFailedError):
            await trade_in.create_device_map(session, {"tac_prefix": "123", "model_keyword": "x"})
