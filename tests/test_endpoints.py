import logging
from logging.handlers import RotatingFileHandler

import pytest

from snowgen import ConfigError, create_app


def test_hello(client):
    response = client.get("/api/")
    assert response.status_code == 200
    assert b"Hello" in response.data


def test_issue_one_id(client):
    response = client.get("/api/id")
    assert response.status_code == 200
    (issued,) = response.get_json()["ids"]
    assert issued["fields"] == {"unused": 0, "machine": 7}
    assert len(issued["hex"]) == 16

    parsed = client.get("/api/parse", query_string={"id": issued["hex"]}).get_json()
    assert parsed == issued


def test_issue_a_batch(client):
    ids = client.get("/api/id?count=5").get_json()["ids"]
    integers = [issued["id"] for issued in ids]
    assert len(set(integers)) == 5
    assert integers == sorted(integers)


@pytest.mark.parametrize("count", ["0", "-1", "1001", "many"])
def test_bad_count(client, count):
    assert client.get("/api/id", query_string={"count": count}).status_code == 400


def test_parse_hex(client):
    response = client.get("/api/parse?id=00e0000000064000")
    assert response.status_code == 200
    assert response.get_json() == {
        "id": 63050394783596544,
        "hex": "00e0000000064000",
        "overtime": 100,
        "sequence": 0,
        "fields": {"unused": 0, "machine": 7},
        "create_time": 1288834974757,
    }


def test_parse_integer(client):
    parsed = client.get("/api/parse?int=255").get_json()
    assert parsed["sequence"] == 255
    assert parsed["hex"] == "00000000000000ff"


@pytest.mark.parametrize(
    "query",
    [{}, {"id": "zz"}, {"id": "1" * 17}, {"int": "ten"}, {"int": str(1 << 64)}],
)
def test_bad_parse_requests(client, query):
    assert client.get("/api/parse", query_string=query).status_code == 400


def test_layout(client):
    described = client.get("/api/layout").get_json()
    assert described["timestamp"] == {"bits": 41, "shift": 12}
    assert [field["name"] for field in described["fields"]] == ["unused", "machine"]


def test_generator_is_exposed_on_the_app(app):
    assert app.extensions["snowgen"].defaults == (0, 7)


def test_bad_configuration_stops_the_app():
    with pytest.raises(ConfigError):
        create_app("testing", {"SNOWFLAKE_FIELDS": "a:40,b:20"})


def test_apps_are_independent():
    first = create_app("testing", {"SNOWFLAKE_DEFAULTS": "machine=1"})
    second = create_app("testing", {"SNOWFLAKE_DEFAULTS": "machine=2"})
    assert first.test_client().get("/api/id").get_json()["ids"][0]["fields"]["machine"] == 1
    assert second.test_client().get("/api/id").get_json()["ids"][0]["fields"]["machine"] == 2


def test_string_strict_flag_from_overrides():
    assert create_app("testing", {"SNOWFLAKE_STRICT": "False"}).extensions["snowgen"].strict is False
    assert create_app("testing", {"SNOWFLAKE_STRICT": "true"}).extensions["snowgen"].strict is True


def test_logging_goes_to_one_logger_and_old_files_are_closed(tmp_path):
    log_file = tmp_path / "logs" / "app.log"
    first = create_app("testing", {"LOG_FILE": str(log_file)})
    (first_file,) = [h for h in first.logger.handlers if isinstance(h, RotatingFileHandler)]
    assert first.logger is logging.getLogger("snowgen")
    assert len(first.logger.handlers) == 2

    second = create_app("testing", {"LOG_FILE": str(log_file)})
    assert first_file.stream is None
    assert first_file not in second.logger.handlers
    assert len(second.logger.handlers) == 2
    assert log_file.exists()
    for handler in second.logger.handlers:
        handler.close()
