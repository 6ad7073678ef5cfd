from brandhub.extensions import db
from brandhub.models import Brand, User

from conftest import TEST_PASSWORD


def test_create_first_admin(app, db_session):
    runner = app.test_cli_runner()
    result = runner.invoke(args=[
        "users", "create", "--email", "root@brandhub.test", "--password", TEST_PASSWORD, "--role", "admin",
    ])
    assert result.exit_code == 0
    assert "PASS Created user root@brandhub.test" in result.output

    db_session.expire_all()
    assert db_session.query(User).filter_by(email="root@brandhub.test").one().role == "admin"


def test_create_user_rejects_weak_password(app, db_session):
    runner = app.test_cli_runner()
    result = runner.invoke(args=[
        "users", "create", "--email", "x@brandhub.test", "--password", "weak", "--role", "customer",
    ])
    assert result.exit_code == 1
    assert "FAIL" in result.output


def test_verify_and_deactivate_brand(app, brand):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["brands", "verify", str(brand.id)])
    assert result.exit_code == 0
    result = runner.invoke(args=["brands", "deactivate", str(brand.id)])
    assert result.exit_code == 0

    result = runner.invoke(args=["brands", "list"])
    assert "No brands found." in result.output

    db.session.expire_all()
    stored = db.session.get(Brand, brand.id)
    assert stored.is_verified is True
    assert stored.is_active is False


def test_unknown_brand(app, db_session):
    result = app.test_cli_runner().invoke(args=["brands", "verify", "999"])
    assert result.exit_code == 1
