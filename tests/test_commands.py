from flask_jwt_extended import decode_token

from confidential_vote import app
from election_helpers import VOTER1


def test_issue_token():
    runner = app.test_cli_runner()
    result = runner.invoke(args=['issue-token', VOTER1, '--expires-in', '60'])
    assert result.exit_code == 0
    with app.app_context():
        assert decode_token(result.output.strip())["sub"] == VOTER1


def test_issue_token_rejects_bad_principal():
    result = app.test_cli_runner().invoke(args=['issue-token', 'alice'])
    assert result.exit_code != 0
    assert 'principal' in result.output


def test_init_db(app_ctx):
    result = app.test_cli_runner().invoke(args=['init-db'])
    assert result.exit_code == 0
    assert 'Database initialized' in result.output
