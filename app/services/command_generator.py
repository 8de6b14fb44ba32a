"""
Command Generator

Renders a shell setup script from a package manager and a set of project
options. Pure functions; persistence lives in command_service.
"""

import re
from typing import Iterable, Protocol, Sequence

from app.models.enums import OptionType


class PackageManagerLike(Protocol):
    name: str
    display_name: str
    install_cmd: str
    add_package_cmd: str
    dev_cmd: str | None
    build_cmd: str | None


class ProjectOptionLike(Protocol):
    name: str
    command: str
    option_type: OptionType


# Sections in the order they appear in the script
SECTIONS: list[tuple[OptionType, str]] = [
    (OptionType.FOLDER, "# 📂 Create Project Structure"),
    (OptionType.PACKAGE, "# 📦 Install Packages"),
    (OptionType.CONFIG, "# ⚙️ Configuration Files"),
    (OptionType.FILE, "# 📄 Create Files"),
    (OptionType.SETUP, "# 🔧 Setup & Configuration"),
]

_PLACEHOLDER = re.compile(r"\{\{\s*([A-Za-z.]+)\s*\}\}")


def process_command(command: str, pm: PackageManagerLike, project_name: str) -> str:
    """
    Substitute placeholders in a command.

    Supported: {{projectName}}, {{pm}}, {{pm.installCmd}}, {{pm.addPackageCmd}},
    {{pm.devCmd}}, {{pm.buildCmd}}, {{packageManager}}. Unknown
    placeholders are left as-is.
    """
    values = {
        "projectName": project_name,
        "pm": pm.name,
        "pm.installCmd": pm.install_cmd,
        "pm.addPackageCmd": pm.add_package_cmd or "install",
        "pm.devCmd": pm.dev_cmd or "run dev",
        "pm.buildCmd": pm.build_cmd or "run build",
        "packageManager": pm.install_cmd,
    }
    return _PLACEHOLDER.sub(
        lambda match: values.get(match.group(1), match.group(0)),
        command,
    ).strip()


def group_options_by_type(
    options: Iterable[ProjectOptionLike],
) -> dict[OptionType, list[ProjectOptionLike]]:
    groups: dict[OptionType, list[ProjectOptionLike]] = {}
    for option in options:
        groups.setdefault(option.option_type or OptionType.SETUP, []).append(option)
    return groups


def needs_init(options: Iterable[ProjectOptionLike]) -> bool:
    return any(
        option.option_type == OptionType.PACKAGE or "install" in option.command
        for option in options
    )


def generate_command_text(
    project_name: str,
    project_category: str,
    pm: PackageManagerLike,
    selected_options: Sequence[ProjectOptionLike],
    custom_options: Sequence[str] = (),
) -> str:
    """
    Build the full setup script.

    Layout: header, mkdir/cd, optional init, one block per option type
    (see SECTIONS), custom commands, then the dev command.
    """
    lines = [
        f"# Generated commands for {project_name} ({project_category})",
        f"# Package Manager: {pm.display_name}",
        "",
        "# 📁 Project Setup",
        f"mkdir {project_name}",
        f"cd {project_name}",
        "",
    ]

    if needs_init(selected_options):
        lines += ["# 🚀 Initialize Project", f"{pm.install_cmd} init -y", ""]

    groups = group_options_by_type(selected_options)
    for option_type, heading in SECTIONS:
        options = groups.get(option_type)
        if not options:
            continue
        lines.append(heading)
        lines.extend(process_command(option.command, pm, project_name) for option in options)
        lines.append("")

    if custom_options:
        lines.append("# 🎯 Custom Commands")
        lines.extend(process_command(custom, pm, project_name) for custom in custom_options)
        lines.append("")

    lines.append("# 🏃 Ready to Start Development")
    if pm.dev_cmd:
        lines.append(pm.dev_cmd)
    lines += ["", "# 🎉 Your project setup is ready!"]

    return "\n".join(lines)


def generate_project_structure(
    project_name: str,
    options: Iterable[ProjectOptionLike],
) -> list[str]:
    """Tree preview listing folder and file options."""
    structure = [f"{project_name}/"]
    for option in options:
        if option.option_type == OptionType.FOLDER:
            structure.append(f"├── 📂 {option.name}/")
        elif option.option_type == OptionType.FILE:
            structure.append(f"├── 📑 {option.name}")
    structure.append("├── ..........")
    return structure
