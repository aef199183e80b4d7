"""Dataclass models representing DB rows.

These are plain Python objects – not ORM models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class Post:
    id: int
    link: str
    description: Optional[str]
    content: Optional[str]
    created: str
    modified: Optional[str]


@dataclass
class PostFile:
    id: int
    post_id: int
    external_url: str
