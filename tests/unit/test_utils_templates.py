"""Unit tests for the packaged Jinja2 template utilities."""

import jinja2
import pytest
from pydantic import BaseModel

from upstream_sync.synchronize.models import SyncPullRequestBody
from upstream_sync.utils.templates import get_packaged_template, render_template_with_model


class PartialBody(BaseModel):
    """A model missing most of the sync pull request body's variables."""

    tag_name: str


def test_render_packaged_template() -> None:
    """Test that the sync pull request body renders every value."""
    template = get_packaged_template("sync_pull_request_body.j2")
    body = render_template_with_model(
        SyncPullRequestBody(tag_name="v1.2.3", upstream_repo="octo/upstream", default_branch="main", branch_name="sync/upstream-v1.2.3"),
        template,
    )

    assert "Merging this PR tags the merge commit as `v1.2.3`." in body
    assert body.endswith("\n")


def test_missing_template() -> None:
    """Test that an unknown template name raises."""
    with pytest.raises(jinja2.TemplateNotFound):
        get_packaged_template("does_not_exist.j2")


def test_undefined_variable_fails_rendering() -> None:
    """Test that a model missing template variables fails instead of rendering blanks."""
    template = get_packaged_template("sync_pull_request_body.j2")

    with pytest.raises(jinja2.UndefinedError):
        render_template_with_model(PartialBody(tag_name="v1.2.3"), template)
