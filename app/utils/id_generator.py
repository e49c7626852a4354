"""
Utility functions for generating consistent display references for various entities.
"""


def generate_unit_code(unit_id: int) -> str:
    """
    Generate a formatted unit code in the format UNIT-XXXX.

    Args:
        unit_id (int): The numeric ID of the unit

    Returns:
        str: A formatted unit code (e.g., UNIT-0001)
    """
    return f"UNIT-{unit_id:04d}"


def generate_request_reference(request_id: int) -> str:
    """
    Generate a formatted rental request reference in the format RR-XXXXXX.

    Args:
        request_id (int): The numeric ID of the rental request

    Returns:
        str: A formatted reference (e.g., RR-000042)
    """
    return f"RR-{request_id:06d}"
