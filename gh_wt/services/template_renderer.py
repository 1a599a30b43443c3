"""Variable substitution for action directories and commands.

Templates reference variables as ``{{.Name}}`` (or ``{{ Name }}``). The set of
names is fixed; referencing anything else, or a variable without a value,
is an error rather than an empty substitution.
"""

import os
import platform
import re
from dataclasses import dataclass
from typing import Dict, Optional

from gh_wt.exceptions import TemplateError
from gh_wt.models.worktree import WorktreeRequest

_PLACEHOLDER = re.compile(r"\{\{\s*\.?([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")

# Go-style names keep existing action configs portable
_OS_NAMES = {"darwin": "darwin", "linux": "linux", "windows": "windows"}
_ARCH_NAMES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "armv7l": "arm",
}


def current_os() -> str:
    system = platform.system().lower()
    return _OS_NAMES.get(system, system)


def current_arch() -> str:
    machine = platform.machine().lower()
    return _ARCH_NAMES.get(machine, machine)


@dataclass(frozen=True)
class TemplateContext:
    """Values available to one action run."""

    worktree_path: str
    worktree_name: str
    action: str
    cli_args: str
    os: str
    arch: str
    root_dir: Optional[str] = None
    type: Optional[str] = None
    owner: Optional[str] = None
    repo: Optional[str] = None
    number: Optional[str] = None
    branch_name: Optional[str] = None

    @classmethod
    def build(
        cls,
        worktree_path: str,
        action: str,
        request: Optional[WorktreeRequest] = None,
        cli_args: str = "",
        root_dir: Optional[str] = None,
    ) -> "TemplateContext":
        fields = request.template_fields() if request else {}
        return cls(
            worktree_path=worktree_path,
            worktree_name=os.path.basename(os.path.normpath(worktree_path)),
            action=action,
            cli_args=cli_args,
            os=current_os(),
            arch=current_arch(),
            root_dir=root_dir,
            type=fields.get("Type"),
            owner=fields.get("Owner"),
            repo=fields.get("Repo"),
            number=fields.get("Number"),
            branch_name=fields.get("BranchName"),
        )

    def variables(self) -> Dict[str, Optional[str]]:
        """Template variable names mapped to their values."""
        return {
            "WorktreePath": self.worktree_path,
            "WorktreeName": self.worktree_name,
            "Action": self.action,
            "CLI_ARGS": self.cli_args,
            "OS": self.os,
            "ARCH": self.arch,
            "ROOT_DIR": self.root_dir,
            "Type": self.type,
            "Owner": self.owner,
            "Repo": self.repo,
            "Number": self.number,
            "BranchName": self.branch_name,
        }


def render(template: str, context: TemplateContext) -> str:
    """Substitute every placeholder in ``template``.

    Text outside ``{{ ... }}`` is copied verbatim.

    Raises:
        TemplateError: On unknown or valueless variables and on unterminated
            or malformed placeholders
    """
    variables = context.variables()
    result = []
    pos = 0

    while True:
        start = template.find("{{", pos)
        if start == -1:
            result.append(template[pos:])
            break

        result.append(template[pos:start])

        match = _PLACEHOLDER.match(template, start)
        if not match:
            raise TemplateError(template, f"malformed placeholder at position {start}")

        name = match.group(1)
        if name not in variables:
            raise TemplateError(template, f"unknown variable '{name}'")
        value = variables[name]
        if value is None:
            raise TemplateError(template, f"variable '{name}' has no value")

        result.append(value)
        pos = match.end()

    return "".join(result)
