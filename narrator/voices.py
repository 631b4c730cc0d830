"""Voice profiles (narration personalities) and default engine voices."""

import logging
from dataclasses import dataclass, field, replace

from narrator.constants import DEFAULT_LANGUAGE, PITCH_RANGE, RATE_RANGE, VOLUME_RANGE
from narrator.models import ProsodySettings, SpeechParams, clamp

logger = logging.getLogger(__name__)

# Hardcoded edge-tts neural voices per locale (avoids network call at startup)
VOICE_POOL = {
    "fr-CA": ["fr-CA-SylvieNeural", "fr-CA-JeanNeural", "fr-CA-AntoineNeural", "fr-CA-ThierryNeural"],
    "fr-FR": ["fr-FR-DeniseNeural", "fr-FR-HenriNeural", "fr-FR-EloiseNeural"],
    "en-US": ["en-US-AriaNeural", "en-US-GuyNeural", "en-US-JennyNeural"],
    "en-GB": ["en-GB-SoniaNeural", "en-GB-RyanNeural"],
}


@dataclass(frozen=True)
class VoiceProfile:
    id: str
    name: str
    name_fr: str
    description: str
    description_fr: str
    prosody: ProsodySettings
    pitch_adjustment: float = 1.0
    rate_adjustment: float = 1.0
    volume_adjustment: float = 1.0
    examples: tuple[str, ...] = field(default_factory=tuple)
    sample_text: str = ""

    def prosody_settings(self) -> ProsodySettings:
        """Fresh copy of the preset, safe to mutate."""
        return replace(self.prosody)


VOICE_PROFILES = {
    "professionnel": VoiceProfile(
        id="professionnel",
        name="Professional",
        name_fr="Professionnel",
        description="Clear, formal, news anchor style",
        description_fr="Voix claire et formelle, style présentateur de nouvelles",
        prosody=ProsodySettings(intensity=0.5, pause_multiplier=1.1),
        rate_adjustment=0.95,
        examples=(
            "Idéal pour les articles de presse",
            "Parfait pour les documents professionnels",
            "Excellent pour les rapports et analyses",
        ),
        sample_text=(
            "Bienvenue à Radio-Canada. Voici les nouvelles du jour. Le gouvernement a "
            "annoncé de nouvelles mesures économiques visant à soutenir les familles canadiennes."
        ),
    ),
    "conversationnel": VoiceProfile(
        id="conversationnel",
        name="Conversational",
        name_fr="Conversationnel",
        description="Warm, friendly, podcast host style",
        description_fr="Voix chaleureuse et amicale, style animateur de balado",
        prosody=ProsodySettings(intensity=0.7, pause_multiplier=1.0),
        pitch_adjustment=1.05,
        examples=(
            "Parfait pour les blogues et articles personnels",
            "Idéal pour les podcasts et discussions",
            "Excellent pour le contenu conversationnel",
        ),
        sample_text=(
            "Salut! Bienvenue sur mon balado. Aujourd'hui, on va parler d'un sujet super "
            "intéressant. Installez-vous confortablement et profitez de l'émission!"
        ),
    ),
    "dramatique": VoiceProfile(
        id="dramatique",
        name="Dramatic",
        name_fr="Dramatique",
        description="Expressive, audiobook narrator style",
        description_fr="Voix expressive et théâtrale, style narrateur de livre audio",
        prosody=ProsodySettings(intensity=0.9, pause_multiplier=1.3, breathing_sounds=True),
        rate_adjustment=0.9,
        volume_adjustment=1.05,
        examples=(
            "Parfait pour les romans et la fiction",
            "Idéal pour la poésie et les textes littéraires",
            "Excellent pour les histoires captivantes",
        ),
        sample_text=(
            "Il était une fois... dans une contrée lointaine... un héros qui allait changer "
            "le destin de son peuple. Son voyage commençait maintenant."
        ),
    ),
    "decontracte": VoiceProfile(
        id="decontracte",
        name="Casual",
        name_fr="Décontracté",
        description="Casual, Quebec colloquial style",
        description_fr="Voix décontractée, style québécois familier",
        prosody=ProsodySettings(intensity=0.6, pause_multiplier=0.9),
        pitch_adjustment=1.1,
        rate_adjustment=1.1,
        examples=(
            "Idéal pour le contenu informel et léger",
            "Parfait pour les messages personnels",
            "Excellent pour un ton détendu et amical",
        ),
        sample_text=(
            "Hey! Ça va bien? J'ai une histoire vraiment cool à te raconter. "
            "Tu vas adorer ça, c'est ben l'fun!"
        ),
    ),
}

FORMAL_WORDS = ("gouvernement", "économie", "politique", "rapport", "analyse", "étude", "recherche")
CASUAL_WORDS = ("hey", "salut", "cool", "fun", "ben", "icitte", "là")
DRAMATIC_WORDS = ("histoire", "fois", "héros", "destin", "voyage", "mystère", "aventure")


def get_voice_profile(profile_id: str | None) -> VoiceProfile | None:
    """Look up a profile by id. Unknown ids log a warning and return None."""
    if not profile_id:
        return None
    profile = VOICE_PROFILES.get(profile_id)
    if profile is None:
        logger.warning("Unknown voice profile: %s", profile_id)
    return profile


def get_all_voice_profiles() -> list[VoiceProfile]:
    return list(VOICE_PROFILES.values())


def get_recommended_profile(text: str) -> str:
    """Pick a profile id from keyword counts in *text*.

    Priority: formal (≥2 hits) → casual → dramatic → conversational.
    """
    lower = text.lower()
    formal = sum(1 for word in FORMAL_WORDS if word in lower)
    casual = sum(1 for word in CASUAL_WORDS if word in lower)
    dramatic = sum(1 for word in DRAMATIC_WORDS if word in lower)

    if formal >= 2:
        return "professionnel"
    if casual >= 2:
        return "decontracte"
    if dramatic >= 2:
        return "dramatique"
    # Many questions read as conversation; so does everything else
    return "conversationnel"


def apply_voice_profile(base: SpeechParams, profile: VoiceProfile) -> SpeechParams:
    """Scale base parameters by the profile's adjustments, clamped."""
    return SpeechParams(
        pitch=clamp(base.pitch * profile.pitch_adjustment, PITCH_RANGE),
        rate=clamp(base.rate * profile.rate_adjustment, RATE_RANGE),
        volume=clamp(base.volume * profile.volume_adjustment, VOLUME_RANGE),
    )


def default_voice_for(language: str | None) -> str:
    """First pool voice for *language*, matching on the language prefix if needed."""
    language = language or DEFAULT_LANGUAGE
    if language in VOICE_POOL:
        return VOICE_POOL[language][0]
    prefix = language.split("-")[0].lower()
    for locale, voices in VOICE_POOL.items():
        if locale.lower().startswith(prefix):
            return voices[0]
    return VOICE_POOL[DEFAULT_LANGUAGE][0]
