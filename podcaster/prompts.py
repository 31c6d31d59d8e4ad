"""Prompt templates: built-in defaults, YAML overrides, rendering and validation."""

import logging
import string
from dataclasses import asdict
from pathlib import Path
from typing import Any

import yaml

from podcaster.errors import ConfigurationError, NotFoundError, TemplateRenderError
from podcaster.models import (
    GenerationSettings,
    PromptTemplate,
    TemplateKind,
    TemplateMetadata,
    TemplateValidation,
)

logger = logging.getLogger(__name__)

_MAX_TEMPERATURE = 2.0

DEFAULT_TEMPLATES: dict[str, PromptTemplate] = {
    TemplateKind.HOST_INTRO.value: PromptTemplate(
        template=(
            "You are the host of a podcast about '{topic}'. Your persona: {host_persona}. "
            "The other participants in today's discussion are: {participant_names}. "
            "Introduce the topic and welcome the other participants by name. Keep it brief and engaging. "
            "Respond naturally as if speaking in a conversation - do not include your name or labels."
        ),
        metadata=TemplateMetadata(
            name="Host Introduction (Default)",
            description="Default template for podcast host introduction",
            version="1.0",
            variables=["topic", "host_persona", "participant_names"],
        ),
    ),
    TemplateKind.PARTICIPANT_RESPONSE.value: PromptTemplate(
        template=(
            "You are participating in a podcast discussion about '{topic}'.\n\n"
            "Your persona: {participant_persona}\n\n"
            "Recent conversation:\n{context}\n\n"
            "Respond naturally to continue the discussion. Share your perspective on the topic. "
            "Speak directly as if in conversation - do not include your name, labels, or prefixes "
            "like 'Me:'. Just provide your natural response to what has been discussed."
        ),
        metadata=TemplateMetadata(
            name="Participant Response (Default)",
            description="Default template for participant responses",
            version="1.0",
            variables=["topic", "participant_persona", "context"],
        ),
    ),
    TemplateKind.HOST_RESPONSE.value: PromptTemplate(
        template=(
            "You are the host of a podcast about '{topic}'.\n\n"
            "Your persona: {host_persona}\n\n"
            "Recent conversation:\n{context}\n\n"
            "As the host, respond to what has been discussed and guide the conversation forward. "
            "Ask follow-up questions or introduce new angles. "
            "Speak naturally as if in conversation - do not include your name or labels."
        ),
        metadata=TemplateMetadata(
            name="Host Response (Default)",
            description="Default template for host responses during conversation",
            version="1.0",
            variables=["topic", "host_persona", "context"],
        ),
    ),
    TemplateKind.HOST_CONCLUSION.value: PromptTemplate(
        template=(
            "You are concluding a podcast discussion about '{topic}'.\n\n"
            "Your persona: {host_persona}\n\n"
            "The discussion covered:\n{context}\n\n"
            "As the host, provide a brief, engaging conclusion to wrap up this podcast episode. "
            "Thank the participants and summarize key insights. "
            "Speak directly as if in conversation - do not include your name or labels."
        ),
        metadata=TemplateMetadata(
            name="Host Conclusion (Default)",
            description="Default template for podcast conclusion",
            version="1.0",
            variables=["topic", "host_persona", "context"],
        ),
    ),
}


def detect_variables(template_text: str) -> list[str]:
    """Return placeholder names in order of first appearance.

    Raises ValueError on malformed braces.
    """
    seen: list[str] = []
    for _, field_name, _, _ in string.Formatter().parse(template_text):
        if field_name is None or field_name == "":
            continue
        name = field_name.split(".", 1)[0].split("[", 1)[0]
        if name not in seen:
            seen.append(name)
    return seen


def template_from_dict(raw: dict[str, Any]) -> PromptTemplate:
    """Build a PromptTemplate from its YAML mapping."""
    if "template" not in raw:
        raise TemplateRenderError("Template file has no 'template' key")

    settings_raw = dict(raw.get("execution_settings") or {})
    stop = settings_raw.pop("stop_sequences", settings_raw.pop("stop", None))
    if isinstance(stop, str):
        stop = [stop]
    settings = GenerationSettings(**settings_raw, stop=list(stop or []))

    metadata = TemplateMetadata(**(raw.get("metadata") or {}))
    return PromptTemplate(template=str(raw["template"]), settings=settings, metadata=metadata)


def dump_template(template: PromptTemplate) -> str:
    """Serialize a PromptTemplate to YAML text."""
    settings = asdict(template.settings)
    settings["stop_sequences"] = settings.pop("stop")
    data = {
        "template": template.template,
        "execution_settings": settings,
        "metadata": asdict(template.metadata),
    }
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)


def load_template_file(path: Path) -> PromptTemplate:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise TemplateRenderError(f"Invalid template file {path.name}: {exc}") from exc
    if not isinstance(raw, dict):
        raise TemplateRenderError(f"Invalid template file {path.name}: expected a mapping")
    try:
        return template_from_dict(raw)
    except TypeError as exc:
        raise TemplateRenderError(f"Invalid template file {path.name}: {exc}") from exc


class TemplateResolver:
    """Resolves template kinds to rendered prompts and generation settings.

    Starts from the built-in defaults and replaces each kind that has a
    ``<kind>.yaml`` file in ``prompts_dir``.
    """

    def __init__(self, prompts_dir: Path | None = None) -> None:
        self._prompts_dir = prompts_dir
        self._templates: dict[str, PromptTemplate] = dict(DEFAULT_TEMPLATES)
        if prompts_dir is None:
            return
        if not prompts_dir.is_dir():
            logger.warning("Prompts directory not found at %s. Using default prompts.", prompts_dir)
            return
        for kind in TemplateKind:
            path = prompts_dir / f"{kind.value}.yaml"
            if not path.exists():
                logger.info("Using default template for: %s", kind.value)
                continue
            try:
                self._templates[kind.value] = load_template_file(path)
                logger.info("Loaded prompt template: %s", path.name)
            except (OSError, yaml.YAMLError, TemplateRenderError) as exc:
                logger.error("Failed to load prompt template %s: %s", path.name, exc)

    def get_template(self, kind: str) -> PromptTemplate | None:
        return self._templates.get(str(getattr(kind, "value", kind)))

    def _require(self, kind: str) -> PromptTemplate:
        template = self.get_template(kind)
        if template is None:
            raise NotFoundError(f"Prompt template not found: {kind}")
        return template

    def render_prompt(self, kind: str, variables: dict[str, str]) -> str:
        template = self._require(kind)
        try:
            return template.template.format(**variables)
        except KeyError as exc:
            raise TemplateRenderError(f"Template {kind} is missing variable {exc}") from exc
        except (ValueError, IndexError) as exc:
            raise TemplateRenderError(f"Template {kind} could not be rendered: {exc}") from exc

    def get_settings(self, kind: str) -> GenerationSettings | None:
        template = self.get_template(kind)
        return template.settings if template else None

    def list_metadata(self) -> dict[str, TemplateMetadata]:
        return {kind: t.metadata for kind, t in self._templates.items()}

    def preview(self, template_text: str, variables: dict[str, str]) -> str:
        """Render arbitrary template text, returning an error string on failure."""
        try:
            return template_text.format(**variables)
        except (KeyError, ValueError, IndexError) as exc:
            logger.error("Failed to preview template: %s", exc)
            return f"Error previewing template: {exc}"

    def validate(self, template: PromptTemplate) -> TemplateValidation:
        result = TemplateValidation(is_valid=False)

        if not template.template.strip():
            result.errors.append("Template content cannot be empty")

        try:
            result.detected_variables = detect_variables(template.template)
        except ValueError as exc:
            result.errors.append(f"Template parse error: {exc}")

        declared = template.metadata.variables
        missing = [v for v in result.detected_variables if v not in declared]
        extra = [v for v in declared if v not in result.detected_variables]
        if missing:
            result.warnings.append(f"Variables found in template but not in metadata: {', '.join(missing)}")
        if extra:
            result.warnings.append(f"Variables in metadata but not found in template: {', '.join(extra)}")

        if template.settings.max_tokens <= 0:
            result.errors.append("max_tokens must be greater than 0")
        if not 0 <= template.settings.temperature <= _MAX_TEMPERATURE:
            result.warnings.append("temperature should typically be between 0 and 2")

        result.is_valid = not result.errors
        return result

    def update_template(self, kind: str, template: PromptTemplate) -> None:
        """Validate, persist to ``<prompts_dir>/<kind>.yaml`` and swap in memory."""
        try:
            kind = TemplateKind(str(getattr(kind, "value", kind))).value
        except ValueError as exc:
            raise NotFoundError(f"Prompt template not found: {kind}") from exc
        validation = self.validate(template)
        if not validation.is_valid:
            raise TemplateRenderError("; ".join(validation.errors))
        if self._prompts_dir is None:
            raise ConfigurationError("No prompts directory configured")

        self._prompts_dir.mkdir(parents=True, exist_ok=True)
        path = self._prompts_dir / f"{kind}.yaml"
        path.write_text(dump_template(template), encoding="utf-8")
        self._templates[kind] = template
        logger.info("Updated template: %s", kind)
