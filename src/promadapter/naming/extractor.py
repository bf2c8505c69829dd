from __future__ import annotations

import re

from promadapter.core.errors import ConfigurationError
from promadapter.naming.templates import Template
from promadapter.resources.models import GroupResource


class LabelGroupResExtractor:
    """
    Extracts group-resources from series labels whose form matches a label template.

    The template is turned into a regular expression by rendering it with
    named captures in place of the group and resource, so anything in the
    template which limits resource or group name length will cause issues.
    """

    def __init__(self, label_template: Template) -> None:
        raw = label_template.render({"Group": "(?P<group>.+?)", "Resource": "(?P<resource>.+?)"})
        if not raw:
            raise ConfigurationError("unable to convert label template to matcher: empty template")
        try:
            regex = re.compile(f"^{raw}$")
        except re.error as e:
            raise ConfigurationError(
                f"unable to convert label template to matcher: {e}",
                details={"template": label_template.text},
            ) from e

        if "resource" not in regex.groupindex:
            raise ConfigurationError(
                "must include at least `<<.Resource>>` in the label template",
                details={"template": label_template.text},
            )

        self.regex = regex
        self._has_group = "group" in regex.groupindex

    def group_resource_for_label(self, label: str) -> tuple[GroupResource, bool]:
        """Extract a group-resource from the label; the flag tells whether the label matched."""
        match = self.regex.fullmatch(label)
        if match is None:
            return GroupResource(), False

        group = match.group("group") if self._has_group else ""
        return GroupResource(group=group or "", resource=match.group("resource")), True
