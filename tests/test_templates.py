"""Tests for rendering resolved versions."""

import json

from flowversion.models import BranchCategory, VersionComponents
from flowversion.templates import env_prefix, render_versions, to_env

RELEASE = VersionComponents(
    major=2,
    flag="rc",
    distance=12,
    short_hash="0123456",
    full_hash="0123456789abcdef0123456789abcdef01234567",
    branch="release/2.0",
    success=True,
    category=BranchCategory.RELEASE,
    version_string="2.0-rc.12",
)


class TestEnv:
    def test_prefix(self):
        assert env_prefix("example-2") == "EXAMPLE_2"
        assert env_prefix("lib.core") == "LIB_CORE"
        assert env_prefix("2app") == "_2APP"

    def test_booleans_are_numbers(self):
        output = to_env({"VERSION_SUCCESS": True, "VERSION_ISDIRTY": False})
        assert output == "VERSION_SUCCESS=1\nVERSION_ISDIRTY=0\n"

    def test_prefixed(self):
        assert to_env({"VERSION_MAJOR": 2}, "APP") == "APP_VERSION_MAJOR=2\n"


class TestRenderVersions:
    def test_default_target_json_is_the_record(self):
        output = render_versions("json", {"default": RELEASE})
        assert json.loads(output) == RELEASE.to_dict()

    def test_named_targets_json(self):
        output = render_versions("json", {"app": RELEASE, "lib": RELEASE})
        assert set(json.loads(output)) == {"app", "lib"}

    def test_text(self):
        output = render_versions("text", {"default": RELEASE})
        assert output.splitlines()[0] == "Version:   2.0-rc.12"
        assert "[default]" not in output
        assert "Dirty:     no" in output
        assert "Complete:  yes" in output

    def test_text_with_names(self):
        output = render_versions("text", {"app": RELEASE, "lib": RELEASE})
        assert "[app]" in output
        assert "[lib]" in output

    def test_markdown(self):
        output = render_versions("markdown", {"app": RELEASE})
        assert "## app" in output
        assert "| Branch | `release/2.0` |" in output

    def test_env_with_names(self):
        output = render_versions("env", {"app": RELEASE, "lib": RELEASE})
        assert "APP_VERSION_STRING=2.0-rc.12" in output.splitlines()
        assert "LIB_VERSION_STRING=2.0-rc.12" in output.splitlines()
