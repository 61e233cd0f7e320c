"""Formatters for auth status, config, and version output."""


def format_auth_status(status):
    if status.get("authenticated"):
        return f"Authenticated: yes (token: {status.get('token_prefix', '')})"
    return "Authenticated: no\nRun 'ado auth login' to authenticate."


def format_config_list(data):
    lines = [
        f"organization  = {data.get('organization', '')}",
        f"project       = {data.get('project', '')}",
        f"output_format = {data.get('output_format', '')}",
    ]
    if data.get("path"):
        lines.append("")
        lines.append(f"Config file: {data['path']}")
    return "\n".join(lines)


def format_version(info):
    return f"ado {info['version']} ({info['os']}/{info['arch']}, Python {info['python_version']})"
