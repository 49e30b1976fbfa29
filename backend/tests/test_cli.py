from salesdesk.gateways import PRODUCTS, SALES
from salesdesk.models import User


def test_system_init_creates_admin(app, db_session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=[
        "system", "init", "--email", "Owner@Shop.test", "--name", "Owner", "--password", "secret123",
    ])

    assert result.exit_code == 0, result.output
    assert "Created admin" in result.output
    user = db_session.query(User).filter_by(email="owner@shop.test").one()
    assert user.role == "admin"

    again = runner.invoke(args=[
        "system", "init", "--email", "owner@shop.test", "--name", "Owner", "--password", "secret123",
    ])
    assert "already exists" in again.output
    assert db_session.query(User).count() == 1


def test_system_init_rejects_short_password(app, db_session):
    result = app.test_cli_runner().invoke(args=[
        "system", "init", "--email", "a@b.c", "--name", "A", "--password", "123",
    ])
    assert result.exit_code != 0
    assert db_session.query(User).count() == 0


def test_seed_demo(app, app_gateway):
    result = app.test_cli_runner().invoke(args=["system", "seed-demo"])

    assert result.exit_code == 0, result.output
    products = {p["name"]: p for p in app_gateway.select(PRODUCTS)}
    assert len(products) == 5
    assert products["Coffee Beans (1kg)"]["stock"] == 80 - 5 - 3
    assert len(app_gateway.select(SALES)) == 4

    rerun = app.test_cli_runner().invoke(args=["system", "seed-demo"])
    assert "SKIP" in rerun.output
    assert len(app_gateway.select(PRODUCTS)) == 5


def test_users_create_and_list(app, db_session):
    runner = app.test_cli_runner()

    created = runner.invoke(args=[
        "users", "create", "--email", "clerk@shop.test", "--name", "Clerk",
        "--password", "secret123", "--role", "sales_staff",
    ])
    assert "PASS" in created.output

    listed = runner.invoke(args=["users", "list"])
    assert "clerk@shop.test" in listed.output
    assert "sales_staff" in listed.output
