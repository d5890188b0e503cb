"""Centralized configuration for the savings product configuration core.

This module contains the default values and business rule constants used by
the tier editor, the document requirement sets and the wire mapping.
"""

# =============================================================================
# INTEREST TIER DEFAULTS
# =============================================================================

# Width given to an open-ended last tier when a new tier is appended after it
DEFAULT_TIER_WIDTH = 50000

# Rate used for the very first tier of an empty product (percent)
DEFAULT_TIER_RATE = 0.0

# Description of a newly added tier ({number} is the 1-based tier position)
TIER_DESCRIPTION_TEMPLATE = "Tier {number} Savings Rate"

# Step between the upper bound of a tier and the lower bound of the next one
TIER_BOUNDARY_STEP = 1

# =============================================================================
# BUSINESS RULES
# =============================================================================

# Allowed interest posting frequencies
POSTING_FREQUENCIES = ("MONTHLY", "QUARTERLY", "ANNUALLY")

# Default posting frequency for a product loaded without one
DEFAULT_POSTING_FREQUENCY = "MONTHLY"

# Upper limit for every percentage field (fees, withholding tax)
MAX_PERCENTAGE = 100.0

# =============================================================================
# WIRE FORMAT
# =============================================================================

# Date format exchanged with the persistence collaborator (ISO 8601)
DATE_FORMAT_WIRE = "%Y-%m-%d"

# Wire field names of the two document requirement sets
REQUIRED_DOCUMENTS_FIELD = "requiredKycDocumentTypeIds"
ALTERNATIVE_DOCUMENTS_FIELD = "alternativeKycDocumentTypeIds"

# Wire field name of the tier list inside the save payload
INTEREST_TIERS_FIELD = "interestTiers"

# =============================================================================
# EDIT SESSION
# =============================================================================

# Maximum number of undoable edits kept per session
MAX_UNDO_DEPTH = 20

# =============================================================================
# DISPLAY FORMATS
# =============================================================================

# Label shown for the open upper bound of the last tier
OPEN_BOUND_LABEL = "Infinity"

# Date format for display
DATE_FORMAT_DISPLAY = "%B %d, %Y"
