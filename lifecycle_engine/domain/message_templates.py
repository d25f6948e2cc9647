"""
domain/message_templates.py — Automated message templates.

Every message the lifecycle engine sends to a client is a registered
template with {placeholder} substitution. Templates cover the onboarding
chain (health assessment, stress card, sleep card) and the "card ready"
notice sent when a reviewed card is released.
"""
from __future__ import annotations

import re
from dataclasses import dataclass


# ===========================================================================
# Template Definition
# ===========================================================================

@dataclass(frozen=True)
class TemplateDefinition:
    """A single message template."""
    name: str
    category: str  # WORKFLOW | CARD
    body: str  # message text with {placeholders}
    title: str = ""  # push notification title
    description: str = ""


# Global template registry
TEMPLATES: dict[str, TemplateDefinition] = {}


def _register(t: TemplateDefinition) -> TemplateDefinition:
    """Register a template in the global registry."""
    TEMPLATES[t.name] = t
    return t


# ===========================================================================
# Template Definitions
# ===========================================================================

# --- Consultation: health assessment ---
CONSULTATION_HEALTH_ASSESSMENT = _register(TemplateDefinition(
    name="consultation_health_assessment",
    category="WORKFLOW",
    title="Health assessment",
    description="Consultation clients: prompt to complete the health assessment",
    body=(
        "Hi {client_name}! It's time to complete your health assessment. "
        "This will help us create your personalized wellness plan."
    ),
))

# --- 100-Day Program: welcome + health assessment ---
HUNDRED_DAYS_HEALTH_ASSESSMENT = _register(TemplateDefinition(
    name="hundred_days_health_assessment",
    category="WORKFLOW",
    title="Welcome to the 100-Day Program",
    description="100-day clients: welcome and health assessment prompt",
    body=(
        "Hi {client_name}! Welcome to the 100-Day Program! "
        "Let's start with your health assessment."
    ),
))

# --- 100-Day Program: stress card ---
HUNDRED_DAYS_STRESS_CARD = _register(TemplateDefinition(
    name="hundred_days_stress_card",
    category="WORKFLOW",
    title="Stress assessment",
    description="100-day clients: stress assessment prompt",
    body=(
        "Hi {client_name}! Time to complete your stress assessment. "
        "This helps us understand your stress patterns better."
    ),
))

# --- 100-Day Program: sleep card ---
HUNDRED_DAYS_SLEEP_CARD = _register(TemplateDefinition(
    name="hundred_days_sleep_card",
    category="WORKFLOW",
    title="Sleep assessment",
    description="100-day clients: sleep assessment prompt",
    body=(
        "Hi {client_name}! Let's assess your sleep patterns. "
        "Good sleep is crucial for your wellness journey!"
    ),
))

# --- Reviewed card released ---
CARD_READY = _register(TemplateDefinition(
    name="card_ready",
    category="CARD",
    title="Your {card_type_name} is ready",
    description="Sent when a dietitian releases a reviewed card",
    body=(
        "Your {card_type_name} is ready! Your dietitian has reviewed and sent "
        "your personalized {card_type_name_lower}. View it in your dashboard to "
        "see your detailed health insights and recommendations."
    ),
))


# ===========================================================================
# Template Rendering
# ===========================================================================

def _substitute(text: str, params: dict | None) -> str:
    if params:
        for key, value in params.items():
            text = text.replace(f"{{{key}}}", str(value))
    return text


def render_template(template_name: str, params: dict | None = None) -> str | None:
    """Render a template body with given parameters.

    Returns:
        Rendered message string, or None if template not found.
        Unknown placeholders are left as-is.
    """
    template = TEMPLATES.get(template_name)
    if not template:
        return None
    return _substitute(template.body, params)


def render_template_safe(
    template_name: str,
    params: dict | None = None,
    default_value: str = "there",
) -> str:
    """Render a template, replacing any unfilled placeholders with a default.

    Unlike render_template(), this never returns None. A missing client
    name reads "Hi there!" instead of "Hi {client_name}!".
    """
    result = render_template(template_name, params)
    if result is None:
        return f"[Template '{template_name}' not found]"

    return re.sub(r"\{(\w+)\}", default_value, result)


def render_title(template_name: str, params: dict | None = None) -> str:
    """Render the push notification title of a template ('' if none)."""
    template = TEMPLATES.get(template_name)
    if not template:
        return ""
    return _substitute(template.title, params)

