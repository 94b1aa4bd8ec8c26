# fieldops/utils/ids.py

from enum import Enum
from uuid import uuid4

class IDPrefix(str, Enum):
    CLIENT = "client"
    JOB = "job"
    EQUIPMENT = "equip"
    IMPORT = "import"

def generate_prefixed_id(prefix: IDPrefix) -> str:
    """
    Generate a UUID string with a prefix.

    Args:
        prefix (IDPrefix): The entity prefix (e.g., CLIENT, JOB).

    Returns:
        str: A prefixed UUID string like 'client-xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx'
    """
    return f"{prefix.value}-{uuid4()}"
