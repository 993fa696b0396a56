"""
Unit tests for CLI entry point (main function)
"""

import json
from unittest.mock import patch

import pytest

from tres.cli import _log_level, build_parser, config_from_args, main
from tres.exceptions import TrelloAuthenticationError
from tres.models import NamedEntity

CREDENTIALS = {"TRELLO_KEY": "test-key", "TRELLO_TOKEN": "test-token"}


@pytest.fixture
def env(tmp_path):
    """Credentials plus an env file path that does not exist"""
    return {**CREDENTIALS, "TRES_ENV_FILE": str(tmp_path / "missing.env")}


def run(argv, environ, client):
    with (
        patch.dict("os.environ", environ, clear=True),
        patch("tres.cli.TrelloClient", return_value=client) as mock_client_class,
    ):
        main(argv)
    return mock_client_class


class TestCLIEntryPoint:
    """Test main() CLI entry point"""

    def test_main_shows_help_with_help_flag(self, capsys):
        """Should show help and exit when --help flag is provided"""
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0
        assert "createlist" in capsys.readouterr().out

    def test_main_without_command_prints_help(self, capsys):
        """Should print usage and exit 1 without a command"""
        with patch("sys.argv", ["tres"]), pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1
        assert "usage: tres" in capsys.readouterr().out

    def test_main_unknown_command(self, env, mock_client, capsys):
        with pytest.raises(SystemExit) as exc_info:
            run(["frobnicate"], env, mock_client)
        assert exc_info.value.code == 1
        assert "Unknown command frobnicate" in capsys.readouterr().err
        mock_client.board_names.assert_not_called()

    def test_main_exits_with_missing_credentials(self, tmp_path, mock_client, capsys):
        """Should exit with error when credentials are missing"""
        environ = {"TRES_ENV_FILE": str(tmp_path / "none.env")}
        with pytest.raises(SystemExit) as exc_info:
            run(["boards"], environ, mock_client)
        assert exc_info.value.code == 1
        assert "TRELLO_KEY environment variable not set" in capsys.readouterr().err

    def test_main_reads_credentials_from_env_file(self, tmp_path, mock_client):
        env_file = tmp_path / "tres.env"
        env_file.write_text("TRELLO_KEY=filekey\nTRELLO_TOKEN=filetoken\nTRELLO_USER=alice\n")

        mock_client_class = run(["boards"], {"TRES_ENV_FILE": str(env_file)}, mock_client)

        mock_client_class.assert_called_once_with("filekey", "filetoken")
        mock_client.board_names.assert_called_once_with("alice")

    def test_main_api_error_exits_1(self, env, mock_client, capsys):
        mock_client.board_names.side_effect = TrelloAuthenticationError(
            "HTTP Status 401: Invalid API credentials.", status_code=401
        )
        with pytest.raises(SystemExit) as exc_info:
            run(["boards"], env, mock_client)
        assert exc_info.value.code == 1
        assert "HTTP Status 401" in capsys.readouterr().err

    def test_main_with_verbose_flag(self, env, mock_client):
        """Should set DEBUG log level with --verbose flag"""
        with patch("tres.cli.setup_logging") as mock_setup_logging:
            run(["boards", "--verbose"], env, mock_client)
        mock_setup_logging.assert_called_once_with("DEBUG", None)

    def test_main_with_log_file(self, env, mock_client, tmp_path):
        log_file = str(tmp_path / "tres.log")
        with patch("tres.cli.setup_logging") as mock_setup_logging:
            run(["boards", "--log-level", "info", "--log-file", log_file], env, mock_client)
        mock_setup_logging.assert_called_once_with("INFO", log_file)


class TestSearchCommand:
    def test_search_text(self, env, mock_client, capsys):
        run(["search", "is:open"], env, mock_client)

        out = capsys.readouterr().out
        mock_client.search_cards.assert_called_once_with("is:open ", 200)
        assert out.startswith("Found 2 cards\n\n")
        assert "Write release notes" in out

    def test_search_flags_after_query(self, env, mock_client, capsys):
        """Flags may follow the positional arguments"""
        run(["search", "is:open", "--format", "csv", "--fields", "name,listname"], env, mock_client)

        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "name\tlistname"
        assert lines[1] == "Write release notes\tDoing"

    def test_search_query_file_directives(self, env, mock_client, capsys, tmp_path):
        query_file = tmp_path / "cards.query"
        query_file.write_text("@format json\n@limit 5\nboard:Product // one board\n")

        run(["search", str(query_file)], env, mock_client)

        mock_client.search_cards.assert_called_once_with("board:Product ", 5)
        data = json.loads(capsys.readouterr().out)
        assert [card["id"] for card in data] == ["card1", "card2"]

    def test_search_invalid_format(self, env, mock_client, capsys):
        """Should fail before any search request is made"""
        with pytest.raises(SystemExit) as exc_info:
            run(["search", "x", "--format", "yaml"], env, mock_client)

        captured = capsys.readouterr()
        assert exc_info.value.code == 1
        assert "invalid output format: yaml" in captured.err
        assert captured.out == ""
        mock_client.search_cards.assert_not_called()

    def test_search_invalid_limit_directive(self, env, mock_client, capsys):
        with pytest.raises(SystemExit) as exc_info:
            run(["search", "@limit lots\nis:open"], env, mock_client)

        assert exc_info.value.code == 1
        assert "@limit" in capsys.readouterr().err
        mock_client.search_cards.assert_not_called()

    def test_search_query_file_not_utf8(self, env, mock_client, capsys, tmp_path):
        """An undecodable query file is reported, not a traceback"""
        query_file = tmp_path / "broken.query"
        query_file.write_bytes(b"is:open \xff\xfe\n")

        with pytest.raises(SystemExit) as exc_info:
            run(["search", str(query_file)], env, mock_client)

        assert exc_info.value.code == 1
        assert "Could not read query file" in capsys.readouterr().err
        mock_client.search_cards.assert_not_called()

    def test_search_requires_query(self, env, mock_client, capsys):
        with pytest.raises(SystemExit) as exc_info:
            run(["search"], env, mock_client)
        assert exc_info.value.code == 1
        assert "search requires" in capsys.readouterr().err

    def test_search_prefetches_with_workers(self, env, mock_client, capsys):
        run(
            ["search", "q", "--fields", "name,comments", "--format", "csv", "--workers", "3"],
            env,
            mock_client,
        )

        mock_client.card_comments.assert_called_once_with("card1")
        assert "@bob on" in capsys.readouterr().out


class TestMembersCommand:
    def test_members_text(self, env, mock_client, capsys):
        run(["members", "product", "--fields", "name,fullname"], env, mock_client)

        out = capsys.readouterr().out
        mock_client.board_members.assert_called_once_with("board1")
        assert out.startswith("Found 2 members\n\n")
        assert "Alice Example" in out

    def test_members_unknown_board(self, env, mock_client, capsys):
        with pytest.raises(SystemExit) as exc_info:
            run(["members", "Nowhere"], env, mock_client)

        assert exc_info.value.code == 1
        assert "Board not found: Nowhere" in capsys.readouterr().err
        mock_client.board_members.assert_not_called()


class TestBoardsCommand:
    def test_boards_listing(self, env, mock_client, capsys):
        run(["boards", "--colsep", ";"], env, mock_client)

        out = capsys.readouterr().out
        assert out.splitlines()[:3] == ["Board;Product;board1", "List;To Do;list1", "List;Doing;list2"]
        assert "Board;Engineering;board2\nList;Backlog;list8\n" in out

    def test_boards_json_not_supported(self, env, mock_client, capsys):
        with pytest.raises(SystemExit) as exc_info:
            run(["boards", "--format", "json"], env, mock_client)

        captured = capsys.readouterr()
        assert exc_info.value.code == 1
        assert "not supported" in captured.err
        assert captured.out == ""


class TestCreateListCommand:
    def test_createlist(self, env, mock_client, capsys):
        mock_client.create_list.return_value = NamedEntity("list99", "Later", "board2")

        run(["createlist", "Engineering", "Later", "--position", "top"], env, mock_client)

        mock_client.create_list.assert_called_once_with("board2", "Later", "top")
        assert capsys.readouterr().out == "List\tLater\tlist99\n"

    def test_createlist_needs_two_arguments(self, env, mock_client, capsys):
        with pytest.raises(SystemExit) as exc_info:
            run(["createlist", "Engineering"], env, mock_client)

        assert exc_info.value.code == 1
        mock_client.create_list.assert_not_called()


class TestArgumentHandling:
    def test_config_from_args_unescapes_separators(self):
        args = build_parser().parse_intermixed_args(
            ["search", "q", "--colsep", "\\t", "--rowsep", "\\r\\n", "--sheet-header", "on"]
        )
        config = config_from_args(args)

        assert config.col_sep == "\t"
        assert config.row_sep == "\r\n"
        assert config.include_header is True

    def test_workers_must_be_positive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_intermixed_args(["search", "q", "--workers", "0"])

    @pytest.mark.parametrize(
        "flags, level",
        [([], "WARNING"), (["-v"], "DEBUG"), (["-q"], "ERROR"), (["--log-level", "info"], "INFO")],
    )
    def test_log_level(self, flags, level):
        assert _log_level(build_parser().parse_intermixed_args(["boards", *flags])) == level
