"""
Message template system for Black Box: Algorithm Ascension.

Jinja2 templates that turn engine occurrences into player-facing log text
and ending narratives.
"""

from pathlib import Path
from typing import Dict, Any, Optional
from jinja2 import Environment, FileSystemLoader, DictLoader, Template, TemplateNotFound


class MessageEngine:
    """
    Jinja2-based message renderer.

    Templates come from `template_dir` when one is given and exists;
    anything missing there falls back to the inline DEFAULT_TEMPLATES.
    """

    def __init__(self, template_dir: Optional[Path] = None):
        self.template_dir = template_dir

        if self.template_dir is not None and self.template_dir.exists():
            loader = FileSystemLoader(str(self.template_dir))
        else:
            loader = DictLoader(DEFAULT_TEMPLATES)

        self.env = Environment(loader=loader, trim_blocks=True, lstrip_blocks=True)

        # Register custom filters
        self.env.filters['currency'] = self._format_currency
        self.env.filters['percent'] = self._format_percent
        self.env.filters['signed'] = self._format_signed

    def _format_currency(self, value) -> str:
        """Format number as currency."""
        try:
            amount = int(float(value))
        except (ValueError, TypeError):
            return f"${value}"
        if amount < 0:
            return f"-${-amount:,}"
        return f"${amount:,}"

    def _format_percent(self, value) -> str:
        """Format number as percentage."""
        try:
            return f"{float(value):.1f}%"
        except (ValueError, TypeError):
            return f"{value}%"

    def _format_signed(self, value) -> str:
        try:
            return f"{int(value):+d}"
        except (ValueError, TypeError):
            return str(value)

    def load_template(self, template_name: str) -> Optional[Template]:
        """Load a Jinja2 template by name."""
        try:
            return self.env.get_template(template_name)
        except TemplateNotFound:
            return None

    def render(self, template_name: str, context: Dict[str, Any]) -> str:
        """Render a template with context."""
        template = self.load_template(template_name)
        if template:
            return template.render(**context).strip()

        # Fallback to inline template
        if template_name in DEFAULT_TEMPLATES:
            return self.env.from_string(DEFAULT_TEMPLATES[template_name]).render(**context).strip()

        return f"[Template '{template_name}' not found]"


# =============================================================================
# INLINE TEMPLATES
# =============================================================================

DEFAULT_TEMPLATES = {
    # Game log
    'log/new_game.txt': (
        "A new {{ archetype }} lab opens on {{ difficulty }} difficulty "
        "with {{ budget | currency }} in the bank."
    ),

    'log/operation.txt': (
        "{{ name }}"
        "{% if gamble is not none %} ({{ 'success' if gamble else 'failure' }}){% endif %}"
        "{% if changes %}: {% for change in changes %}{{ change.field }} {{ change.delta | signed }}"
        "{% if not loop.last %}, {% endif %}{% endfor %}{% endif %}."
    ),

    'log/event.txt': "{{ name }}: {{ description }}",

    'log/exam.txt': (
        "Exam \"{{ scenario_name }}\" ({{ focus | join(', ') }}): traffic reward {{ final_reward }}. "
        "{% if passed %}Passed, paid {{ payout | currency }}."
        "{% else %}Failed{% if not meets_threshold %} the dimension threshold{% endif %}, "
        "penalty {{ penalty | currency }}.{% endif %}"
    ),

    'log/salary.txt': "Paid {{ amount | currency }} in salaries.",

    'log/layoff.txt': "Could not make payroll: {{ name }} ({{ rarity }}) was let go.",

    'log/level_up.txt': (
        "{{ name }} reached level {{ level }}"
        "{% if traits %} and learned {{ traits | join(', ') }}{% endif %}."
    ),

    'log/hire.txt': "Hired {{ name }} ({{ rarity }}) for {{ cost | currency }}.",

    'log/fire.txt': "{{ name }} left the team; {{ refund | currency }} refunded.",

    'log/equipment.txt': "Upgraded {{ kind }} to {{ level_name }} (level {{ level }}) for {{ cost | currency }}.",

    'log/upkeep.txt': "Turn {{ turn }} closed: upkeep {{ upkeep | currency }}, entropy {{ entropy_change | signed }}.",

    'log/meltdown.txt': (
        "Server meltdown! Entropy at {{ entropy | percent }}, {{ penalty | currency }} lost "
        "({{ turns }} turn(s) in a row)."
    ),

    'log/game_over.txt': "Game over: {{ title }}.",

    'log/victory.txt': "Victory: {{ title }} after {{ exams_passed }} exams.",

    # Endings
    'endings/defeat.txt': '''
{% if ending_type == 'bankruptcy' %}
The money ran out on turn {{ turn }}. Two turns in the red was all the investors would take.
{% elif ending_type == 'entropy_collapse' %}
The system drowned in its own entropy. After {{ meltdown_turns }} straight turns of meltdown, nothing would boot.
{% elif ending_type == 'legal_shutdown' %}
Regulators pulled the plug. Legal risk hit {{ legal_risk | percent }} and the lab was shut down.
{% endif %}
You passed {{ exams_passed }} exam(s) with a fit score of {{ fit_score }}. Final score: {{ score }} (grade {{ grade }}).
''',

    'endings/victory.txt': '''
{% if ending_type == 'algorithmic_ascension' %}
Every capability crossed the line at once. The model is no longer catching up; everyone else is.
{% elif ending_type == 'industry_leader' %}
The model leads the field in {{ strong_dimensions }} dimensions. The industry now benchmarks against you.
{% else %}
It was never pretty, but the lab survived all {{ exams_passed }} exams.
{% endif %}
Finished on turn {{ turn }} with {{ budget | currency }}. Final score: {{ score }} (grade {{ grade }}).
''',
}


# Global message engine instance
_engine: Optional[MessageEngine] = None


def get_message_engine() -> MessageEngine:
    """Get or create the global message engine."""
    global _engine
    if _engine is None:
        _engine = MessageEngine()
    return _engine


def render_message(template_name: str, context: Dict[str, Any]) -> str:
    """Convenience function to render a template."""
    return get_message_engine().render(template_name, context)
