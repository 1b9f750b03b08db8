"""Constants used by the jobs app.

Option lists live here so forms, dashboard charts and seed data share them.
"""

from __future__ import annotations


EXPERIENCE_LEVELS = [
    "Entry Level",
    "Mid Level",
    "Senior Level",
    "Lead",
    "Manager",
    "Director",
    "Executive",
]

EXPERIENCE_LEVEL_CHOICES = [(level, level) for level in EXPERIENCE_LEVELS]

COMPANY_SIZES = [
    "1-10 employees",
    "11-50 employees",
    "51-200 employees",
    "201-500 employees",
    "501-1000 employees",
    "1001-5000 employees",
    "5000+ employees",
]

RESUME_EXTENSIONS = {"pdf", "doc", "docx"}
RESUME_CONTENT_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}

COVER_LETTER_MIN_LENGTH = 10
JOB_TITLE_MIN_LENGTH = 5
JOB_DESCRIPTION_MAX_LENGTH = 5000
