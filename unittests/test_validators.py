import asyncio
import re
from typing import Any
from urllib.parse import parse_qs

import httpx
import pytest
from conftest import checkbox_form, text_form

from fvframework import (
    ConfigurationError,
    ElementKind,
    FieldElement,
    Form,
    Status,
    ValidationManager,
    ValidatorRegistry,
    default_registry,
)
from fvframework.validators import Callback, Remote, Validator


def check(validator_name: str, value: str, /, **options: Any) -> Status:
    manager = ValidationManager(
        text_form(field=value), {"fields": {"field": {"validators": {validator_name: options}}}}
    )
    manager.validate_field("field")
    return manager.field_status("field")


class TestValueValidators:
    @pytest.mark.parametrize(
        "validator_name, value, options, expected",
        [
            pytest.param("integer", "12", {}, Status.VALID, id="integer"),
            pytest.param("integer", "-7", {}, Status.VALID, id="negative integer"),
            pytest.param("integer", "12.5", {}, Status.INVALID, id="decimal is no integer"),
            pytest.param("integer", "012", {}, Status.INVALID, id="leading zero"),
            pytest.param("integer", "12\n", {}, Status.INVALID, id="trailing newline"),
            pytest.param("numeric", "12.5", {}, Status.VALID, id="numeric"),
            pytest.param("numeric", "nan", {}, Status.INVALID, id="nan"),
            pytest.param("numeric", "inf", {}, Status.INVALID, id="infinity"),
            pytest.param("numeric", "1_000", {}, Status.INVALID, id="digit group separator"),
            pytest.param("numeric", " 1e3 ", {}, Status.VALID, id="exponent"),
            pytest.param("digits", "0042", {}, Status.VALID, id="digits"),
            pytest.param("digits", "42a", {}, Status.INVALID, id="no digits"),
            pytest.param("digits", "\u0661\u0662", {}, Status.INVALID, id="arabic-indic digits"),
            pytest.param("digits", "42\n", {}, Status.INVALID, id="digits and newline"),
            pytest.param("emailAddress", "jane@example.com", {}, Status.VALID, id="email"),
            pytest.param("emailAddress", "jane@", {}, Status.INVALID, id="broken email"),
            pytest.param("emailAddress", "jane@example.com\n", {}, Status.INVALID, id="email and newline"),
            pytest.param("regexp", "AB-12", {"regexp": r"^[A-Z]{2}-\d+$"}, Status.VALID, id="regexp"),
            pytest.param("regexp", "ab-12", {"regexp": re.compile(r"^[A-Z]{2}")}, Status.INVALID, id="compiled"),
            pytest.param("stringLength", " abc ", {"min": 3, "max": 3}, Status.VALID, id="stripped length"),
            pytest.param("stringLength", "abcd", {"max": 3}, Status.INVALID, id="too long"),
            pytest.param("stringCase", "abc", {}, Status.VALID, id="lower case"),
            pytest.param("stringCase", "abc", {"case": "upper"}, Status.INVALID, id="not upper case"),
            pytest.param("between", "10", {"min": 1, "max": 10}, Status.VALID, id="inclusive bound"),
            pytest.param("between", "10", {"min": 1, "max": 10, "inclusive": False}, Status.INVALID, id="exclusive"),
            pytest.param("between", "abc", {"min": 1, "max": 10}, Status.INVALID, id="not a number"),
            pytest.param("between", "1_0", {"min": 1, "max": 10}, Status.INVALID, id="separated number"),
            pytest.param("greaterThan", "5", {"value": 5}, Status.VALID, id="greater or equal"),
            pytest.param("greaterThan", "5", {"value": "5", "inclusive": False}, Status.INVALID, id="greater"),
            pytest.param("lessThan", "4.5", {"value": 5}, Status.VALID, id="less"),
            pytest.param("lessThan", "6", {"value": 5}, Status.INVALID, id="not less"),
            pytest.param("notEmpty", "  ", {}, Status.INVALID, id="blank"),
            pytest.param("notEmpty", "x", {}, Status.VALID, id="not empty"),
        ],
    )
    def test_validator(self, validator_name: str, value: str, options: dict, expected: Status):
        assert check(validator_name, value, **options) == expected

    @pytest.mark.parametrize(
        "validator_name, options",
        [
            pytest.param("integer", {}, id="integer"),
            pytest.param("emailAddress", {}, id="email"),
            pytest.param("regexp", {"regexp": "^x$"}, id="regexp"),
            pytest.param("stringLength", {"min": 5}, id="stringLength"),
            pytest.param("between", {"min": 1, "max": 2}, id="between"),
            pytest.param("identical", {"field": "other"}, id="identical"),
            pytest.param("remote", {"url": "https://example.com"}, id="remote"),
        ],
    )
    def test_empty_value_is_valid(self, validator_name: str, options: dict):
        assert check(validator_name, "", **options) == Status.VALID

    @pytest.mark.parametrize(
        "validator_name, options, message",
        [
            pytest.param("regexp", {}, "regexp: Not found", id="missing pattern"),
            pytest.param("between", {"min": 1}, "max: Not found", id="missing bound"),
            pytest.param("remote", {"name": "login"}, "url: Not found", id="missing url"),
            pytest.param("stringLength", {"min": "3"}, "min:", id="mistyped length"),
            pytest.param("identical", {"field": 42}, "field:", id="mistyped field"),
        ],
    )
    def test_malformed_options_are_rejected_up_front(self, validator_name: str, options: dict, message: str):
        with pytest.raises(ConfigurationError) as error_info:
            check(validator_name, "abc", **options)
        assert error_info.value.option_path == f"fields.field.validators.{validator_name}"
        assert message in str(error_info.value)


class TestChoiceValidators:
    def test_choice_counts_the_group(self):
        form = checkbox_form("colors", 3)
        manager = ValidationManager(form, {"fields": {"colors": {"validators": {"choice": {"min": 2, "max": 2}}}}})
        elements = form.elements("colors")
        for checked, expected in [((0,), Status.INVALID), ((0, 2), Status.VALID), ((0, 1, 2), Status.INVALID)]:
            for index, element in enumerate(elements):
                element.checked = index in checked
            manager.reset_form()
            manager.validate_field("colors")
            assert manager.field_status("colors") == expected

    def test_choice_on_select(self):
        form = Form([FieldElement("tags", kind=ElementKind.SELECT, selected=("a",))])
        manager = ValidationManager(form, {"fields": {"tags": {"validators": {"choice": {"min": 2}}}}})
        manager.validate_field("tags")
        assert manager.field_status("tags") == Status.INVALID

    def test_not_empty_on_radio_group(self):
        form = checkbox_form("size", 2, ElementKind.RADIO)
        manager = ValidationManager(form, {"fields": {"size": {"validators": {"notEmpty": {}}}}})
        manager.validate_field("size")
        assert manager.field_status("size") == Status.INVALID
        manager.set_checked("size", 1)
        manager.validate_field("size")
        assert manager.field_status("size") == Status.VALID


class TestRelationalValidators:
    @pytest.mark.parametrize(
        "validator_name, other_value, expected",
        [
            pytest.param("identical", "secret", Status.VALID, id="identical"),
            pytest.param("identical", "other", Status.INVALID, id="not identical"),
            pytest.param("different", "other", Status.VALID, id="different"),
            pytest.param("different", "secret", Status.INVALID, id="not different"),
        ],
    )
    def test_counterpart_is_settled(self, validator_name: str, other_value: str, expected: Status):
        form = text_form(password=other_value, confirm="secret")
        manager = ValidationManager(
            form,
            {
                "fields": {
                    "password": {"validators": {validator_name: {"field": "confirm"}}},
                    "confirm": {"validators": {validator_name: {"field": "password"}}},
                }
            },
        )
        manager.validate_field("confirm")
        assert manager.field_status("confirm") == expected
        expected_counterpart = Status.VALID if expected == Status.VALID else Status.NOT_VALIDATED
        assert manager.field_status("password") == expected_counterpart

    def test_missing_counterpart_is_tolerated(self):
        manager = ValidationManager(
            text_form(confirm="secret"), {"fields": {"confirm": {"validators": {"identical": {"field": "password"}}}}}
        )
        manager.validate_field("confirm")
        assert manager.field_status("confirm") == Status.VALID


class TestCallbackValidator:
    def test_sync_callback(self):
        seen = []

        def is_even(value, context):
            seen.append((value, context.field.name))
            return int(value) % 2 == 0

        assert check("callback", "4", callback=is_even) == Status.VALID
        assert check("callback", "5", callback=is_even) == Status.INVALID
        assert seen == [("4", "field"), ("5", "field")]

    def test_without_callback_everything_is_valid(self):
        assert check("callback", "anything") == Status.VALID

    async def test_async_callback(self):
        async def is_free(value, _context):
            await asyncio.sleep(0)
            return value != "taken"

        manager = ValidationManager(
            text_form(user="taken"), {"fields": {"user": {"validators": {"callback": {"callback": is_free}}}}}
        )
        manager.validate_field("user")
        assert manager.field_status("user") == Status.VALIDATING
        await manager.wait_until_settled()
        assert manager.field_status("user") == Status.INVALID

    def test_registry_rejects_non_validators(self):
        registry = ValidatorRegistry()
        with pytest.raises(TypeError):
            registry.register("callback", lambda *_: True)  # type: ignore[arg-type]
        registry.register("callback", Callback())
        assert "callback" in registry
        assert isinstance(registry.get("callback"), Validator)
        assert registry.get("nothing") is None


class TestRemoteValidator:
    @staticmethod
    def manager_for(handler, value: str, **options: Any) -> ValidationManager:
        registry = default_registry()
        registry.register("remote", Remote(transport=httpx.MockTransport(handler)))
        return ValidationManager(
            text_form(username=value),
            {"fields": {"username": {"validators": {"remote": {"url": "https://example.com/check", **options}}}}},
            validators=registry,
        )

    @pytest.mark.parametrize(
        "answer, expected",
        [
            pytest.param(True, Status.VALID, id="true"),
            pytest.param("true", Status.VALID, id="true string"),
            pytest.param(False, Status.INVALID, id="false"),
            pytest.param(None, Status.INVALID, id="missing"),
        ],
    )
    async def test_answer(self, answer: Any, expected: Status):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"valid": answer})

        manager = self.manager_for(handler, "jane")
        manager.validate_field("username")
        await manager.wait_until_settled()
        assert manager.field_status("username") == expected
        assert requests[0].method == "POST"
        assert parse_qs(requests[0].content.decode()) == {"username": ["jane"]}

    async def test_payload_options(self):
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(parse_qs(request.content.decode()))
            return httpx.Response(200, json={"valid": True})

        manager = self.manager_for(
            handler, "jane", name="login", data=lambda context: {"form": context.manager.fields["username"].name}
        )
        manager.validate_field("username")
        await manager.wait_until_settled()
        assert bodies == [{"login": ["jane"], "form": ["username"]}]

    async def test_server_error_fails_closed(self, caplog: pytest.LogCaptureFixture):
        manager = self.manager_for(lambda request: httpx.Response(500), "jane")
        manager.validate_field("username")
        await manager.wait_until_settled()
        assert manager.field_status("username") == Status.INVALID
        assert "asynchronous check failed" in caplog.text
