"""
Constants for startup profiles, submissions and uploads
"""

# Sector vocabulary a startup can be tagged with
AVAILABLE_SECTORS = [
    "Agritech",
    "Biotech",
    "Cleantech",
    "E-commerce",
    "Edtech",
    "Fintech",
    "Foodtech",
    "Healthtech",
    "Legaltech",
    "Proptech",
    "SaaS",
    "Social Impact",
    "Tourism",
    "Other",
]

MIN_TAGS = 1
MAX_TAGS = 5

MIN_FOUNDED_YEAR = 1900

SOCIAL_NETWORKS = ["linkedin", "twitter", "facebook", "instagram"]

# Fields stripped from a startup for anyone but investors
PREMIUM_FIELDS = ["email", "phone", "pitch_deck_url"]

# Descriptive profile carried from an approved submission onto its startup
PROFILE_FIELDS = [
    "name",
    "short_description",
    "long_description",
    "logo_url",
    "founded_year",
    "operating_status",
    "location",
    "tags",
    "employee_range",
    "website",
    "email",
    "phone",
    "social_links",
    "funding_received",
    "pitch_deck_url",
]

# Fields an approved owner may change on their own startup
OWNER_EDITABLE_FIELDS = [
    "name",
    "short_description",
    "long_description",
    "logo_url",
    "founded_year",
    "operating_status",
    "location",
    "tags",
    "employee_range",
    "website",
    "email",
    "phone",
    "social_links",
    "funding_received",
    "pitch_deck_url",
]

# Storage key prefixes
SUBMISSION_PREFIX = "submissions"
ADMIN_STARTUP_PREFIX = "startups"

# MIME types for supported uploads
SUPPORTED_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".svg": "image/svg+xml",
    ".pdf": "application/pdf",
}

# Draft autosave
DRAFT_KEY = "startup-submission-draft"
AUTOSAVE_DELAY_SECONDS = 1.0
