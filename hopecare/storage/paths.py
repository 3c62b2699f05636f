"""Build unique storage paths for uploaded files."""

import secrets
import string
import time

_ALPHABET = string.ascii_lowercase + string.digits


def get_file_extension(filename: str) -> str:
    """Lower-cased extension without the dot, or "" when the name has none."""
    name = filename.rsplit("/", 1)[-1]
    if "." not in name.strip("."):
        return ""
    return name.rsplit(".", 1)[-1].lower()


def generate_file_path(directory: str, filename: str) -> str:
    """Return "<directory>/<ms timestamp>-<6 random chars>.<ext>" for an upload."""
    timestamp = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(6))
    ext = get_file_extension(filename)
    name = f"{timestamp}-{suffix}.{ext}" if ext else f"{timestamp}-{suffix}"
    directory = directory.strip("/")
    return f"{directory}/{name}" if directory else name


def generate_user_file_path(user_id: str, filename: str) -> str:
    return generate_file_path(f"users/{user_id}", filename)


def generate_project_file_path(project_id: str, filename: str) -> str:
    return generate_file_path(f"projects/{project_id}", filename)


def generate_event_file_path(event_id: str, filename: str) -> str:
    return generate_file_path(f"events/{event_id}", filename)
