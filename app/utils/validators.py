"""Custom validators"""

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException, status


def validate_object_id(id_str: str) -> bool:
    """
    Validate if a string is a valid MongoDB ObjectId

    Args:
        id_str: String to validate

    Returns:
        True if valid ObjectId, False otherwise
    """
    try:
        ObjectId(id_str)
        return True
    except (InvalidId, TypeError):
        return False


def parse_object_id(id_str: str, label: str = "ID") -> ObjectId:
    """
    Convert a path/body identifier to an ObjectId or fail with 400

    Args:
        id_str: String to convert
        label: Name used in the error message, e.g. "product ID"

    Raises:
        HTTPException: If the string is not a valid ObjectId
    """
    if not validate_object_id(id_str):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {label}"
        )
    return ObjectId(id_str)
