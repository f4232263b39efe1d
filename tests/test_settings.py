"""Tests for the settings registry."""

from __future__ import annotations

import pytest

from global_options.services.hooks import Hook


def test_registered_default_applies_to_absent_option(options, settings):
    settings.register("general", "color", default="blue")

    assert options.get("color") == "blue"
    assert options.add("color", "red") is True
    assert options.get("color") == "red"
    assert options.delete("color") is True
    assert options.get("color") == "blue"


def test_explicit_default_beats_registered_default(options, settings):
    settings.register("general", "color", {"default": "blue"})

    assert options.get("color", "green") == "green"


def test_add_succeeds_before_any_read(options, settings):
    """The registered default alone does not make the option exist."""
    settings.register("general", "color", default="blue")

    assert options.add("color", "red") is True
    assert options.add("color", "pink") is False


def test_update_of_absent_option_with_default_adds_it(options, settings, repository):
    settings.register("general", "color", default="blue")

    assert options.update("color", "red") is True
    assert repository.get_row("color").autoload == "no"


def test_register_merges_args_over_defaults(settings):
    args = settings.register("reading", "per_page", {"type": "integer", "description": "Posts per page"})

    assert args.type == "integer"
    assert args.group == "reading"
    assert args.description == "Posts per page"
    assert args.sanitize_callback is None
    assert args.show_in_rest is False
    assert args.has_default is False
    assert "default" not in args.as_dict()


def test_register_installs_sanitize_and_validate(options, settings, hooks, context):
    def must_be_short(errors, value, name):
        if len(value) > 5:
            errors.add("too_long", "Too long")
        return errors

    settings.register(
        "general",
        "slug",
        sanitize=lambda value, name, original: value.lower(),
        validate=must_be_short,
    )

    assert hooks.has(Hook.SANITIZE_OPTION, "slug")
    assert hooks.has(Hook.VALIDATE_OPTION, "slug")

    assert options.add("slug", "ABC") is True
    assert options.get("slug") == "abc"
    assert options.update("slug", "MUCH-TOO-LONG") is False
    assert options.get("slug") == "abc"
    assert context.settings_errors.get("slug")[0].message == "Too long"


def test_validated_setting_rejects_value(options, settings):
    settings.register(
        "general",
        "color",
        default="blue",
        validate=lambda errors, value, name: errors.add("bad", "no red") or errors if value == "red" else errors,
    )
    options.update("color", "green")

    assert options.update("color", "red") is False
    assert options.get("color") == "green"


def test_unregister_tears_down_hooks(options, settings, hooks):
    settings.register("general", "color", default="blue", sanitize=lambda v, n, o: v)

    settings.unregister("general", "color")

    assert not hooks.has(Hook.SANITIZE_OPTION, "color")
    assert not hooks.has(Hook.DEFAULT_OPTION, "color")
    assert "color" not in settings
    assert settings.whitelist()["general"] == []
    assert options.get("color") is False


def test_unregister_twice_is_noop(settings):
    settings.register("general", "color")

    settings.unregister("general", "color")
    settings.unregister("general", "color")
    settings.unregister("other", "never")

    assert settings.get("color") is None


def test_unregister_leaves_unrelated_hooks(settings, hooks):
    def keep(value, name, original):
        return value

    hooks.add_filter(Hook.SANITIZE_OPTION, keep, "color")
    settings.register("general", "color", sanitize=lambda v, n, o: v)

    settings.unregister("general", "color")

    assert hooks.callbacks(Hook.SANITIZE_OPTION, "color") == [keep]


def test_reregister_replaces_hooks(settings, hooks):
    settings.register("general", "color", sanitize=lambda v, n, o: "first")
    settings.register("general", "color", sanitize=lambda v, n, o: "second")

    callbacks = hooks.callbacks(Hook.SANITIZE_OPTION, "color")
    assert len(callbacks) == 1
    assert callbacks[0](None, "color", None) == "second"
    assert settings.whitelist() == {"general": ["color"]}


def test_list_and_whitelist(settings):
    settings.register("general", "color")
    settings.register("general", "title")
    settings.register("reading", "per_page", type="integer")

    assert set(settings.list()) == {"color", "title", "per_page"}
    assert settings.list()["per_page"].type == "integer"
    assert settings.whitelist() == {"general": ["color", "title"], "reading": ["per_page"]}
    assert "title" in settings


def test_unknown_arguments_raise(settings):
    with pytest.raises(TypeError, match="colour"):
        settings.register("general", "color", colour="blue")


def test_register_setting_args_filter(settings, hooks):
    def force_rest(args, defaults, group, name):
        return {**args, "show_in_rest": True}

    hooks.add_filter(Hook.REGISTER_SETTING_ARGS, force_rest)

    assert settings.register("general", "color").show_in_rest is True
