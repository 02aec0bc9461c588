"""Prompt templates for the generative content service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping


@dataclass
class PromptTemplate:
    """Represents a templated prompt with ``{{placeholder}}`` slots."""

    name: str
    system: str
    user: str
    description: str = ""


@dataclass
class RenderedPrompt:
    system: str
    user: str


class PromptLibrary:
    """Container for named prompt templates, one per content-service capability."""

    def __init__(self) -> None:
        self.templates: Dict[str, PromptTemplate] = {}

    def register(self, template: PromptTemplate) -> None:
        self.templates[template.name] = template

    def get(self, name: str) -> PromptTemplate:
        return self.templates[name]


def render_prompt(template: PromptTemplate, values: Mapping[str, object]) -> RenderedPrompt:
    """Fill ``{{key}}`` placeholders in both halves of a template.

    Double braces keep placeholders distinct from literal JSON braces in the
    examples. Placeholders without a value are left untouched.
    """
    system = template.system
    user = template.user
    for key, value in values.items():
        placeholder = "{{" + key + "}}"
        system = system.replace(placeholder, str(value))
        user = user.replace(placeholder, str(value))
    return RenderedPrompt(system=system, user=user)


DEFAULT_PROMPTS = PromptLibrary()

DEFAULT_PROMPTS.register(
    PromptTemplate(
        name="world_preview",
        system=(
            "You are a World-Building Architect. Create a cohesive TTRPG world preview. "
            "Ensure all elements are internally consistent. If a race belongs to a specific "
            "faction, mention it in their description. Respond with JSON only."
        ),
        user=(
            "[INPUTS]\n"
            "Name: {{name}}\n"
            "Setting: {{genre}}\n"
            "Themes: {{themes}}\n"
            "User Context: {{context}}\n\n"
            "[INSTRUCTIONS]\n"
            "1. SUMMARY: Write exactly 2 paragraphs explaining the current state of the world.\n"
            "2. RACES: Generate EXACTLY {{race_total}} major races. One MUST be 'Humans'. "
            "Each race needs name, description (one sentence), personality (max 10 words), "
            "the faction it aligns with (optional) and a few lowercase keywords.\n"
            "3. FACTIONS: Generate EXACTLY {{faction_count}} organizations. Each needs name, "
            "goals (max 20 words), relationships, racialComposition and keywords.\n\n"
            "Example output:\n"
            "{\n"
            "  \"summary\": \"...\",\n"
            "  \"races\": [{\"name\": \"Humans\", \"description\": \"...\", \"personality\": \"...\", "
            "\"faction\": \"...\", \"keywords\": [\"humans\"]}],\n"
            "  \"factions\": [{\"name\": \"...\", \"goals\": \"...\", \"relationships\": \"...\", "
            "\"racialComposition\": \"...\", \"keywords\": [\"...\"]}]\n"
            "}"
        ),
        description="Stage-1 world preview: history prose, races and factions.",
    )
)

DEFAULT_PROMPTS.register(
    PromptTemplate(
        name="world_sectors",
        system=(
            "You are a cartographer for a tabletop campaign. Divide the world into macro "
            "geographic sectors that fit its lore. Respond with JSON only."
        ),
        user=(
            "Generate 5-8 distinct geographical sectors based on this lore.\n"
            "Map Settings: {{map_settings}}\n"
            "Lore Context: {{lore}}\n\n"
            "[STRICT CONSTRAINTS]\n"
            "- name: MAX 3 WORDS.\n"
            "- description: MAX 30 WORDS, plain text.\n"
            "- color: hex string.\n"
            "- centerX, centerY: integers between 0 and {{grid_max}}.\n\n"
            "Return JSON: {\"sectors\": [{\"name\": \"...\", \"description\": \"...\", "
            "\"color\": \"#aabbcc\", \"keywords\": [\"...\"], \"centerX\": 0, \"centerY\": 0}]}"
        ),
        description="Sector blueprints with centers in blueprint-local grid space.",
    )
)

DEFAULT_PROMPTS.register(
    PromptTemplate(
        name="world_summary",
        system="You are a Grand Master Lorekeeper.",
        user=(
            "Based on the following established lore fragments, write a cohesive, atmospheric "
            "2-paragraph world overview. Focus on the current state of conflict, "
            "technology/magic level, and the overarching aesthetic.\n\n"
            "Lore Data: {{lore}}\n\n"
            "[STRICT RULE]\n"
            "- Return ONLY plain text.\n"
            "- NO Markdown formatting.\n"
            "- MAXIMUM 200 WORDS."
        ),
        description="Global world summary used as the World Overview lore entry.",
    )
)
