"""
Unit tests for settings resolution.

Precedence: defaults < .env < flags < environment.
"""

import pytest

from urlshortener.config import Settings, build_arg_parser, split_host_port


def test_defaults(tmp_path):
    s = Settings.load(argv=[], environ={}, dotenv_path=None)
    assert s.run_addr == "localhost:8080"
    assert s.base_url == "http://localhost:8080"
    assert s.log_level == "info"
    assert s.file_storage_path == ""
    assert s.database_dsn == ""
    assert s.delete_flush_interval == 10.0
    assert s.delete_intake_size == 1
    assert s.delete_batch_size == 64
    assert s.request_timeout == 30.0
    assert s.resolved_backend() == "memory"


def test_flags():
    s = Settings.load(
        argv=["-a", "0.0.0.0:9090", "-b", "https://sho.rt/", "-l", "debug", "-f", "/tmp/u.json", "-d", "postgresql://x"],
        environ={},
        dotenv_path=None,
    )
    assert s.run_addr == "0.0.0.0:9090"
    assert s.host == "0.0.0.0"
    assert s.port == 9090
    assert s.base_url == "https://sho.rt"
    assert s.log_level == "debug"
    assert s.file_storage_path == "/tmp/u.json"
    assert s.database_dsn == "postgresql://x"
    assert s.resolved_backend() == "postgres"


def test_env_overrides_flags():
    s = Settings.load(
        argv=["-a", "localhost:1111", "-b", "http://flag"],
        environ={"SERVER_ADDRESS": "localhost:2222", "BASE_URL": "http://env"},
        dotenv_path=None,
    )
    assert s.run_addr == "localhost:2222"
    assert s.base_url == "http://env"


def test_dotenv_is_lowest_file_layer(tmp_path):
    dotenv = tmp_path / ".env"
    dotenv.write_text("BASE_URL=http://dotenv\nLOG_LEVEL=warning\nSECRET_KEY=from-file\n", encoding="utf-8")
    s = Settings.load(argv=["-l", "error"], environ={}, dotenv_path=str(dotenv))
    assert s.base_url == "http://dotenv"
    assert s.log_level == "error"
    assert s.secret_key == "from-file"


def test_missing_dotenv_is_ignored(tmp_path):
    s = Settings.load(argv=[], environ={}, dotenv_path=str(tmp_path / "nope.env"))
    assert s.base_url == "http://localhost:8080"


def test_file_path_selects_file_backend():
    s = Settings.load(argv=[], environ={"FILE_STORAGE_PATH": "/tmp/u.json"}, dotenv_path=None)
    assert s.resolved_backend() == "file"


def test_explicit_backend_override():
    s = Settings(database_dsn="postgresql://x", storage_backend=" Memory ")
    assert s.resolved_backend() == "memory"


def test_pipeline_tuning_from_env():
    s = Settings.load(
        argv=None,
        environ={
            "SHORTENER_DELETE_FLUSH_INTERVAL": "0.5",
            "SHORTENER_DELETE_INTAKE_SIZE": "4",
            "SHORTENER_DELETE_BATCH_SIZE": "128",
            "SHORTENER_REQUEST_TIMEOUT": "3",
        },
        dotenv_path=None,
    )
    assert s.delete_flush_interval == 0.5
    assert s.delete_intake_size == 4
    assert s.delete_batch_size == 128
    assert s.request_timeout == 3.0


def test_invalid_numbers_fall_back_to_defaults():
    s = Settings.load(
        argv=None,
        environ={"SHORTENER_DELETE_FLUSH_INTERVAL": "soon", "SHORTENER_DELETE_BATCH_SIZE": "many"},
        dotenv_path=None,
    )
    assert s.delete_flush_interval == 10.0
    assert s.delete_batch_size == 64


def test_queue_sizes_are_at_least_one():
    s = Settings(delete_intake_size=0, delete_batch_size=-5)
    assert s.delete_intake_size == 1
    assert s.delete_batch_size == 1


@pytest.mark.parametrize(
    "addr,expected",
    [
        ("localhost:8080", ("localhost", 8080)),
        (":9090", ("0.0.0.0", 9090)),
        ("[::1]:8080", ("::1", 8080)),
        ("127.0.0.1:0", ("127.0.0.1", 0)),
    ],
)
def test_split_host_port(addr, expected):
    assert split_host_port(addr) == expected


@pytest.mark.parametrize("addr", ["8080", "localhost", "localhost:http", "::1:8080", "[::1:8080", "host:70000", ""])
def test_bad_address_rejected(addr):
    with pytest.raises(ValueError):
        split_host_port(addr)


def test_settings_reject_address_without_port():
    with pytest.raises(ValueError):
        Settings(run_addr="8080")


def test_ipv6_listen_address_unbracketed_for_server():
    s = Settings(run_addr="[::1]:8080")
    assert (s.host, s.port) == ("::1", 8080)
    assert s.run_addr == "[::1]:8080"


def test_repr_hides_secrets():
    text = repr(Settings(database_dsn="postgresql://user:hunter2@db/x", secret_key="s3cr3t"))
    assert "hunter2" not in text
    assert "s3cr3t" not in text
    assert "database_dsn='set'" in text


def test_arg_parser_flags():
    args = build_arg_parser().parse_args(["-f", "/tmp/x.json"])
    assert args.file_storage_path == "/tmp/x.json"
    assert args.run_addr is None
