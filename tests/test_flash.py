from werkzeug.test import Client
from werkzeug.wrappers import Response

from uptimebot.flash import (
    FLASH_KEY_ERRORS,
    FLASH_KEY_SUCCESSES,
    FlashMiddleware,
    FlashStore,
    current_flash_id,
    flash_context,
)


def test_set_and_pop():
    store = FlashStore()
    store.set("test-id", "key1", ["value1"])
    assert store.pop("test-id", "key1") == ["value1"]
    assert store.pop("test-id", "key1") is None


def test_pop_keeps_other_keys():
    store = FlashStore()
    store.set("id", "a", ["1"])
    store.set("id", "b", ["2"])
    assert store.pop("id", "a") == ["1"]
    assert store.pop("id", "b") == ["2"]


def test_current_flash_id_outside_context():
    assert current_flash_id() == ""


def test_flash_context_restores():
    with flash_context("abc"):
        assert current_flash_id() == "abc"
    assert current_flash_id() == ""


def recording_app(seen):
    def app(environ, start_response):
        seen.append(current_flash_id())
        return Response("ok")(environ, start_response)

    return app


def test_middleware_sets_cookie():
    seen = []
    client = Client(FlashMiddleware(recording_app(seen)), use_cookies=False)
    response = client.get("/")
    cookies = response.headers.getlist("Set-Cookie")
    assert len(cookies) == 1
    name, _, rest = cookies[0].partition("=")
    value = rest.split(";")[0]
    assert name == "flash_id"
    assert value
    assert seen == [value]
    assert "Path=/" in cookies[0]


def test_middleware_uses_existing_cookie():
    seen = []
    client = Client(FlashMiddleware(recording_app(seen)), use_cookies=False)
    response = client.get("/", headers={"Cookie": "flash_id=existing"})
    assert seen == ["existing"]
    assert response.headers.getlist("Set-Cookie") == []


def test_set_errors():
    store = FlashStore()
    store.set_errors(["error1", "error2"])
    assert store.pop("", FLASH_KEY_ERRORS) is None

    with flash_context("test-flash-id"):
        store.set_errors(["error1", "error2"])
    assert store.pop("test-flash-id", FLASH_KEY_ERRORS) == ["error1", "error2"]
    assert store.pop("test-flash-id", FLASH_KEY_ERRORS) is None


def test_set_successes():
    store = FlashStore()
    store.set_successes(["success1", "success2"])
    assert store.pop("", FLASH_KEY_SUCCESSES) is None

    with flash_context("test-flash-id"):
        store.set_successes(["success1", "success2"])
    assert store.pop("test-flash-id", FLASH_KEY_SUCCESSES) == ["success1", "success2"]
    assert store.pop("test-flash-id", FLASH_KEY_SUCCESSES) is None


def test_get_successes():
    store = FlashStore()
    assert store.get_successes() is None
    with flash_context("test-flash-id"):
        store.set_successes(["success1", "success2"])
        assert store.get_successes() == ["success1", "success2"]
        assert store.get_successes() is None


def test_get_errors():
    store = FlashStore()
    assert store.get_errors() is None
    with flash_context("test-flash-id"):
        store.set_errors(["error1", "error2"])
        assert store.get_errors() == ["error1", "error2"]
        assert store.get_errors() is None


def test_flash_ids_are_isolated():
    store = FlashStore()
    with flash_context("one"):
        store.set_errors(["a"])
    with flash_context("two"):
        assert store.get_errors() is None
    with flash_context("one"):
        assert store.get_errors() == ["a"]