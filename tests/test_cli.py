import pytest

from api_playground import ApiKey, DB as db


@pytest.fixture
def runner(app, api):
    return app.test_cli_runner()


def test_create_key(runner) -> None:
    result = runner.invoke(args=["playground-keys", "create", "--expires-in", "2"])
    assert result.exit_code == 0, result.output
    assert "Token: " in result.output
    token = result.output.split("Token: ")[1].split()[0]
    db.session.expire_all()
    api_key = ApiKey.find_by_token(token)
    assert api_key is not None
    assert not api_key.expired


def test_list_keys(runner) -> None:
    result = runner.invoke(args=["playground-keys", "list"])
    assert result.exit_code == 0
    assert "No api keys" in result.output

    api_key = ApiKey.create()
    db.session.commit()
    result = runner.invoke(args=["playground-keys", "list"])
    assert result.exit_code == 0
    assert api_key.token in result.output
    assert "valid" in result.output
    assert "never" in result.output


def test_revoke_key(runner) -> None:
    api_key = ApiKey.create()
    db.session.commit()
    token = api_key.token
    result = runner.invoke(args=["playground-keys", "revoke", token])
    assert result.exit_code == 0
    db.session.expire_all()
    assert ApiKey.find_by_token(token) is None

    result = runner.invoke(args=["playground-keys", "revoke", token])
    assert result.exit_code != 0
    assert f"Unknown api key {token}" in result.output


def test_purge_expired_keys(runner) -> None:
    ApiKey.create(expires_in_days=-1)
    ApiKey.create()
    db.session.commit()
    result = runner.invoke(args=["playground-keys", "purge-expired"])
    assert result.exit_code == 0
    assert "Deleted 1 expired api key(s)" in result.output
    db.session.expire_all()
    assert db.session.query(ApiKey).count() == 1
