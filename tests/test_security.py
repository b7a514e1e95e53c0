from api import config
from api.mdns import build_service_info
from api.security import load_or_create_server_id, load_or_create_token, tokens_match


def test_token_is_created_once(tmp_path):
    path = tmp_path / "nested" / "token.txt"
    token = load_or_create_token(path)
    assert len(token) == 32
    assert path.read_text(encoding="utf-8") == token
    assert load_or_create_token(path) == token


def test_blank_token_file_is_regenerated(tmp_path):
    path = tmp_path / "token.txt"
    path.write_text("  \n", encoding="utf-8")
    assert load_or_create_token(path).strip()


def test_server_id_is_stable(tmp_path):
    path = tmp_path / "server_id.txt"
    assert load_or_create_server_id(path) == load_or_create_server_id(path)


def test_tokens_match():
    assert tokens_match("abc", "abc")
    assert not tokens_match("abc", "abd")


def test_service_info_advertises_api_path():
    info = build_service_info("server-1", port=8123)
    assert info.port == 8123
    assert info.type == "_kinship._tcp.local."
    assert info.properties[b"path"] == b"/api"
    assert info.properties[b"server_id"] == b"server-1"


def test_config_keeps_files_under_data_dir():
    assert not hasattr(config, "BASE_DIR")
    assert config.DB_PATH.parent == config.FILES_DIR
    assert config.TOKEN_PATH.parent == config.FILES_DIR
