"""
Keyword Vocabulary

Curated word lists used to judge candidate phrases:
- Stop words that may not open or close a phrase
- Generic site furniture (footer, cookie banner, navigation) that never
  makes a useful keyword
- Business-type vocabularies for the relevance check
- Known locations for service + location combinations
- Search intent patterns
"""

import re
from typing import List, Optional


# =============================================================================
# STOP WORDS
# =============================================================================

STOP_WORDS = frozenset({
    "a", "an", "the", "and", "or", "but", "nor", "so", "yet",
    "in", "on", "at", "to", "for", "of", "with", "by", "from", "into",
    "onto", "off", "over", "under", "about", "as", "via", "per",
    "is", "are", "was", "were", "be", "been", "being", "am",
    "it", "its", "this", "that", "these", "those", "there", "here",
    "we", "our", "us", "you", "your", "they", "their", "them", "i", "me", "my",
    "he", "she", "his", "her", "him",
    "can", "will", "would", "should", "could", "may", "might", "must",
    "do", "does", "did", "have", "has", "had",
    "not", "no", "all", "any", "some", "more", "most", "very", "just",
    "also", "than", "then", "if", "when", "which", "who", "what", "how",
    "why", "where", "up", "out",
})


# =============================================================================
# GENERIC SITE FURNITURE
# =============================================================================

# A candidate containing any of these is rejected outright
GENERIC_PHRASES = (
    "all rights reserved", "rights reserved", "copyright",
    "privacy policy", "cookie policy", "cookie settings", "accept cookies",
    "terms and conditions", "terms conditions", "terms of use", "terms of service",
    "contact us", "about us", "get in touch", "home page", "homepage",
    "click here", "read more", "learn more", "find out more", "see more",
    "get started", "sign up", "sign in", "log in", "login", "register now",
    "subscribe", "newsletter", "follow us", "social media", "connect with us",
    "latest news", "get the latest", "skip to content", "back to top",
    "website uses", "this website", "our website", "site map", "sitemap",
    "we can help", "can help you", "help you get",
    "facebook", "twitter", "linkedin", "instagram", "youtube",
)

# Segments containing these as whole words are dropped before n-grams are generated
GENERIC_SEGMENT_MARKERS = (
    "all rights reserved", "copyright", "©", "privacy policy",
    "cookie policy", "cookie settings", "cookie preferences", "accept cookies",
    "use cookies", "uses cookies", "use of cookies",
    "terms and conditions", "follow us", "newsletter",
    "subscribe", "sign up", "log in",
)


# =============================================================================
# BUSINESS VOCABULARIES
# =============================================================================

COMMON_BUSINESS_TERMS = [
    "service", "support", "professional", "expert", "specialist",
    "consultation", "advice", "guidance", "solution", "business", "commercial",
]

BUSINESS_VOCABULARIES = {
    "food & hospitality": [
        "food", "catering", "restaurant", "kitchen", "dining", "meal", "recipe",
        "chef", "cooking", "culinary", "hospitality", "hotel", "cafe", "menu",
        "equipment", "machine", "machinery", "processing", "production",
        "manufacturing", "chocolate", "confection", "bakery", "ingredient",
    ],
    "healthcare & medical": [
        "medical", "health", "healthcare", "treatment", "therapy", "clinic",
        "doctor", "dentist", "patient", "care", "practice", "diagnosis",
        "medicine", "wellness", "rehabilitation", "physiotherapy", "pharmacy",
    ],
    "technology & software": [
        "technology", "software", "digital", "tech", "system", "platform",
        "development", "programming", "data", "cloud", "application", "app",
        "website", "mobile", "automation", "ai", "machine learning", "it",
    ],
    "professional services": [
        "consulting", "consultancy", "advisory", "strategy", "management",
        "analysis", "optimisation", "optimization", "implementation", "training",
    ],
    "manufacturing & industrial": [
        "manufacturing", "industrial", "production", "factory", "machinery",
        "machine", "equipment", "processing", "assembly", "fabrication",
        "automation", "engineering", "quality", "supply", "logistics",
    ],
    "retail & e-commerce": [
        "retail", "shop", "store", "product", "sale", "buy", "purchase",
        "customer", "shopping", "merchandise", "brand", "collection",
        "delivery", "online", "ecommerce", "gift",
    ],
    "marketing & digital": [
        "marketing", "advertising", "digital", "seo", "ppc", "social media",
        "branding", "website", "web design", "agency", "creative", "campaign",
        "content", "graphic design", "public relations", "communications", "media",
    ],
    "legal services": [
        "legal", "law", "solicitor", "barrister", "lawyer", "attorney",
        "litigation", "conveyancing", "probate", "divorce", "employment",
        "criminal", "family", "property", "court", "representation",
    ],
    "construction & trades": [
        "building", "construction", "builder", "electrician", "plumber",
        "plumbing", "heating", "roofing", "decorator", "joiner", "carpenter",
        "renovation", "maintenance", "repair", "installation", "extension",
        "home improvement",
    ],
    "financial services": [
        "financial", "finance", "accounting", "accountant", "tax", "investment",
        "insurance", "mortgage", "loan", "pension", "planning", "bookkeeping",
        "audit", "compliance", "payroll",
    ],
    "architecture & design": [
        "architectural", "architecture", "architect", "design", "designer",
        "planning", "building", "extension", "renovation", "sustainable",
        "heritage", "conservation", "drawings", "interior",
    ],
}

DEFAULT_BUSINESS_TERMS = [
    "company", "companies", "industry", "product", "customer", "quality",
    "experience", "provider", "supplier", "firm", "enterprise", "corporate",
]


def get_business_terms(business_type: Optional[str]) -> List[str]:
    """
    Get the relevance vocabulary for a business-type label.

    Labels are matched case-insensitively; unknown labels fall back to a
    general business vocabulary.
    """
    key = (business_type or "").strip().lower()
    specific = BUSINESS_VOCABULARIES.get(key, DEFAULT_BUSINESS_TERMS)
    return COMMON_BUSINESS_TERMS + specific


def contains_term(phrase: str, terms: List[str]) -> bool:
    """
    Check whether a phrase contains any vocabulary term.

    Terms match at a word start, so "service" matches "services" and "ai"
    does not match "maintain".
    """
    lowered = phrase.lower()
    for term in terms:
        if re.search(r"\b" + re.escape(term.lower()), lowered):
            return True
    return False


# =============================================================================
# LOCATIONS & SERVICES
# =============================================================================

UK_LOCATIONS = (
    "london", "manchester", "birmingham", "leeds", "glasgow", "liverpool",
    "bristol", "sheffield", "edinburgh", "leicester", "coventry", "bradford",
    "cardiff", "belfast", "nottingham", "newcastle", "southampton", "brighton",
    "oxford", "cambridge", "york", "exeter", "plymouth", "reading",
    "devon", "cornwall", "somerset", "dorset", "kent", "surrey", "essex",
    "yorkshire", "lancashire",
)

SERVICE_NOUNS = (
    "services", "service", "solutions", "consulting", "design",
    "development", "support", "management", "installation", "repair",
    "maintenance", "cleaning", "training",
)


# =============================================================================
# SEARCH INTENT
# =============================================================================

TRANSACTIONAL_PATTERN = re.compile(r"\b(buy|purchase|order|shop|price|prices|cost|cheap|affordable|hire|quote)\b")
COMMERCIAL_PATTERN = re.compile(r"\b(best|top|review|reviews|compare|comparison|vs|versus|alternative|alternatives)\b")
INFORMATIONAL_PATTERN = re.compile(r"\b(how|what|why|when|where|guide|tutorial|tips|ideas|examples)\b")


def detect_search_intent(keyword: str) -> str:
    """Classify a keyword as transactional, commercial, informational or navigational."""
    lowered = keyword.lower()

    if TRANSACTIONAL_PATTERN.search(lowered):
        return "transactional"
    if COMMERCIAL_PATTERN.search(lowered):
        return "commercial"
    if INFORMATIONAL_PATTERN.search(lowered):
        return "informational"
    return "navigational"
