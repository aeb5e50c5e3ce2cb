"""Template engine domain models.

Pydantic models specific to template rendering and data preparation.
These models are kept here to avoid circular imports with the API layer.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Word package parts that must exist for a container to be a template.
CONTENT_TYPES_PART = "[Content_Types].xml"
MAIN_DOCUMENT_PART = "word/document.xml"
REQUIRED_PARTS = (CONTENT_TYPES_PART, MAIN_DOCUMENT_PART)

# Parts that may hold placeholders, in scan order.
TEXT_PARTS = (
    MAIN_DOCUMENT_PART,
    "word/header1.xml",
    "word/header2.xml",
    "word/header3.xml",
    "word/footer1.xml",
    "word/footer2.xml",
    "word/footer3.xml",
)

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class ImageDescriptor(BaseModel):
    """An image found in the data payload, ready for an IMAGE directive."""

    model_config = ConfigDict(frozen=True)

    width: float = Field(description="Image width in centimetres")
    height: float = Field(description="Image height in centimetres")
    data: str = Field(description="Base64 payload without the data URI prefix")
    extension: Literal[".png", ".jpg", ".jpeg"] = Field(
        description="File extension matching the image format"
    )
