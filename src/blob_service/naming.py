import uuid


def original_suffix(filename: str) -> str:
    """Extension with its leading dot, case preserved."""
    idx = filename.rfind(".")
    if idx == -1:
        return ""
    return filename[idx:]


def generate_storage_name(filename: str) -> str:
    # random uuid4, never derived from the user supplied name
    return f"{uuid.uuid4()}{original_suffix(filename)}"
