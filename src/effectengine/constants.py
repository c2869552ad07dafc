# Key paths added during base data preparation that are always treated as formulas,
# even though the schema declares no field for them.
FORMULA_FIELDS = frozenset(
    {
        "system.attributes.ac.bonus",
        "system.attributes.ac.min",
        "system.attributes.encumbrance.bonuses.encumbered",
        "system.attributes.encumbrance.bonuses.heavilyEncumbered",
        "system.attributes.encumbrance.bonuses.maximum",
        "system.attributes.encumbrance.bonuses.overall",
        "system.attributes.encumbrance.multipliers.encumbered",
        "system.attributes.encumbrance.multipliers.heavilyEncumbered",
        "system.attributes.encumbrance.multipliers.maximum",
        "system.attributes.encumbrance.multipliers.overall",
    }
)

# Namespaces
SYSTEM_PREFIX = "system."
FLAGS_PREFIX = "flags.dnd5e."
FLAG_SCOPE = "dnd5e"

# Change values
OVERRIDE_PLACEHOLDER = "{}"
ARRAY_DELIMITER = ","

# Exhaustion is a staged condition; reaching the last level kills the creature.
EXHAUSTION_LEVELS = 6
EXHAUSTION_ICON = "systems/dnd5e/icons/svg/statuses/exhaustion.svg"
EXHAUSTION_PATH = "system.attributes.exhaustion"
EXHAUSTION_FLAG = "exhaustionLevel"

# Who may see the bloodied status: "all", "player" (friendly tokens only) or "none".
BLOODIED_VISIBILITY = "player"

# Special status ids the lifecycle code reacts to.
STATUS_DEAD = "dead"
STATUS_CONCENTRATING = "concentrating"
STATUS_BLOODIED = "bloodied"
STATUS_EXHAUSTION = "exhaustion"

# Actor flags that effects may target under flags.dnd5e.<name>.
CHARACTER_FLAGS = {
    "diamondSoul": {"type": bool},
    "elvenAccuracy": {"type": bool},
    "halflingLucky": {"type": bool},
    "initiativeAdv": {"type": bool},
    "initiativeAlert": {"type": bool},
    "jackOfAllTrades": {"type": bool},
    "observantFeat": {"type": bool},
    "powerfulBuild": {"type": bool},
    "reliableTalent": {"type": bool},
    "remarkableAthlete": {"type": bool},
    "tavernBrawlerFeat": {"type": bool},
    "weaponCriticalThreshold": {"type": int, "placeholder": 20},
    "spellCriticalThreshold": {"type": int, "placeholder": 20},
    "meleeCriticalDamageDice": {"type": int, "placeholder": 0},
}

# Seconds per duration unit when converting item durations to effect durations.
DURATION_SECONDS = {
    "minute": 60,
    "hour": 60 * 60,
    "day": 60 * 60 * 24,
    "year": 60 * 60 * 24 * 365,
}

# Localization keys surfaced through notifications.
WARNING_CONCENTRATION_BREAK = "DND5E.ConcentrationBreakWarning"
ERROR_ENCHANTMENT_ON_ACTOR = "DND5E.ENCHANTMENT.Warning.NotOnActor"
WARNING_RIDER_VETOED = "DND5E.RiderCreationVetoed"
