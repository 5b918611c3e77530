import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.services.exceptions import DataStoreUnavailable
from app.services.shop_sources import AdminShopSource, AgentShopSource


@pytest.fixture()
def tableless_session():
    engine = create_engine("sqlite://")
    session = sessionmaker(bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.mark.parametrize("source_cls,kind", [(AdminShopSource, "admin"), (AgentShopSource, "agent")])
def test_read_failure_raises_data_store_unavailable(tableless_session, source_cls, kind):
    with pytest.raises(DataStoreUnavailable) as excinfo:
        source_cls(tableless_session).query()
    assert excinfo.value.source == kind
    assert excinfo.value.original_error is not None


def test_admin_source_returns_admin_shape(db_session, admin_shop_factory):
    shop = admin_shop_factory(plan_type="HERO", district="Patna", full_address="Boring Road, Patna", area="Kankarbagh")
    rows = AdminShopSource(db_session).query()
    assert [r["id"] for r in rows] == [shop.id]
    row = rows[0]
    assert row["planType"] == "HERO"
    assert row["fullAddress"] == "Boring Road, Patna"
    assert row["area"] == "Kankarbagh"
    assert row["lastPaymentDate"] is not None


def test_agent_source_returns_agent_shape(db_session, agent_shop_factory):
    agent_shop_factory(payment_status="PAID", agent_commission=120, address="Station Road, Gaya")
    row = AgentShopSource(db_session).query()[0]
    assert row["paymentStatus"] == "PAID"
    assert float(row["agentCommission"]) == 120
    assert row["address"] == "Station Road, Gaya"


def test_district_filter_matches_district_city_or_address(db_session, admin_shop_factory):
    by_district = admin_shop_factory(district="patna")
    by_city = admin_shop_factory(city="Patna")
    by_address = admin_shop_factory(full_address="12 Station Road, Patna")
    admin_shop_factory(district="Gaya")

    ids = {r["id"] for r in AdminShopSource(db_session).query(district="PATNA")}
    assert ids == {by_district.id, by_city.id, by_address.id}
    assert len(AdminShopSource(db_session).query(district="all")) == 4


@pytest.mark.parametrize("district", ["P_tna", "%", "Pat%"])
def test_district_filter_treats_wildcards_literally(db_session, agent_shop_factory, district):
    agent_shop_factory(address="12 Station Road, Patna")
    assert AgentShopSource(db_session).query(district=district) == []
