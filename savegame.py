"""
Save/load for Black Box: Algorithm Ascension.

serialize() and deserialize() are the persistence boundary: plain data in,
plain data out, with structural validation and version migration on the way
in. Nothing is partially adopted; a save either loads completely or raises.
"""

import base64
import binascii
import copy
import json
import logging
import re
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from errors import InvalidSaveData, SerializationFailure
from state import (
    GameState,
    ARCHETYPES,
    DIFFICULTIES,
    DIMENSIONS,
    EQUIPMENT_KINDS,
    FIT_SCORE_WEIGHTS,
    GAME_STATUSES,
    MAX_EQUIPMENT_LEVEL,
    MODEL_METRICS,
    RARITIES,
    TRAITS,
    DEFAULT_DATA_CAPACITY,
    DEFAULT_DIMENSION_VALUE,
    STATE_VERSION,
)

logger = logging.getLogger(__name__)

CURRENT_VERSION = STATE_VERSION
LEGACY_VERSION = '1.0.0'

SAVE_DIR = Path("data/savegames")


# =============================================================================
# SCHEMA
# =============================================================================

# Fields every save, however old, must carry
REQUIRED_V1_FIELDS: Tuple[Tuple[str, type], ...] = (
    ('resources.budget', int),
    ('resources.compute_points', int),
    ('resources.compute_max', int),
    ('resources.dirty_data', int),
    ('resources.golden_data', int),
    ('metrics.fit_score', int),
    ('metrics.entropy', int),
    ('metrics.fit_score_cap', int),
    ('progress.turn', int),
    ('progress.turns_until_exam', int),
    ('progress.consecutive_negative_budget', int),
    ('risks.legal_risk', int),
    ('risks.server_meltdown', bool),
    ('archetype', str),
    ('game_status', str),
)

SECTION_FIELDS: Dict[str, Tuple[str, ...]] = {
    'resources': (
        'budget', 'compute_points', 'compute_max', 'dirty_data', 'golden_data', 'data_capacity', 'compute_bonus',
    ),
    'metrics': ('fit_score', 'entropy', 'fit_score_cap') + MODEL_METRICS,
    'dimensions': DIMENSIONS,
    'progress': ('turn', 'turns_until_exam', 'consecutive_negative_budget', 'exams_passed', 'side_jobs_this_turn'),
    'risks': ('legal_risk', 'server_meltdown', 'meltdown_turns'),
}

BOOLEAN_FIELDS = {'risks.server_meltdown'}

MEMBER_FIELDS = ('id', 'name', 'rarity', 'base_stats', 'traits', 'level', 'experience', 'hiring_cost', 'salary')
BASE_STAT_FIELDS = ('compute_contribution', 'data_efficiency', 'maintenance_skill')

TOP_LEVEL_FIELDS = tuple(SECTION_FIELDS) + (
    'equipment', 'archetype', 'difficulty', 'reputation', 'team', 'hiring_pool',
    'game_status', 'game_over_reason', 'ending_type', 'version',
)


# =============================================================================
# MIGRATION
# Each entry: (version that introduced the field, dotted path, default).
# A callable default is computed from the raw data being migrated.
# =============================================================================

def _metric_from_fit(metric: str) -> Callable[[Dict[str, Any]], int]:
    def default(raw: Dict[str, Any]) -> int:
        return int(raw['metrics']['fit_score'] * FIT_SCORE_WEIGHTS[metric])
    return default


def _equipment_default(kind: str) -> Dict[str, Any]:
    return {'kind': kind, 'level': 1, 'max_level': MAX_EQUIPMENT_LEVEL}


MIGRATIONS: Tuple[Tuple[str, str, Any], ...] = (
    tuple(('2.0.0', f'dimensions.{dim}', DEFAULT_DIMENSION_VALUE) for dim in DIMENSIONS)
    + (
        ('2.0.0', 'reputation', 0),
        ('2.0.0', 'team', []),
        ('2.0.0', 'hiring_pool', []),
        ('2.0.0', 'difficulty', 'normal'),
    )
    + tuple(('2.0.0', f'equipment.{kind}', _equipment_default(kind)) for kind in EQUIPMENT_KINDS)
    + (
        ('2.0.0', 'progress.exams_passed', 0),
        ('2.0.0', 'progress.side_jobs_this_turn', 0),
    )
    + tuple(('2.0.0', f'metrics.{metric}', _metric_from_fit(metric)) for metric in MODEL_METRICS)
    + (
        ('2.0.0', 'resources.data_capacity', DEFAULT_DATA_CAPACITY),
        ('2.0.0', 'risks.meltdown_turns', 0),
        ('2.0.0', 'game_over_reason', None),
        ('2.0.0', 'ending_type', None),
        ('2.1.0', 'resources.compute_bonus', 0),
    )
)

# Enumeration values renamed between versions: (version, dotted path, {old: new})
VALUE_RENAMES: Tuple[Tuple[str, str, Dict[str, str]], ...] = (
    ('2.0.0', 'game_status', {'gameOver': 'game_over'}),
)


def _version_key(version: str) -> Tuple[int, ...]:
    try:
        return tuple(int(part) for part in version.split('.'))
    except (AttributeError, ValueError):
        raise InvalidSaveData(f"Malformed save version: {version!r}") from None


_MISSING = object()


def _get_path(data: Dict[str, Any], path: str, default=_MISSING):
    node = data
    for key in path.split('.'):
        if not isinstance(node, dict) or key not in node:
            return default
        node = node[key]
    return node


def _set_path(data: Dict[str, Any], path: str, value):
    keys = path.split('.')
    node = data
    for key in keys[:-1]:
        node = node.setdefault(key, {})
    node[keys[-1]] = value


def migrate(raw: Dict[str, Any], from_version: str) -> Dict[str, Any]:
    """
    Bring raw save data from `from_version` up to CURRENT_VERSION.

    Fills every field introduced after from_version that the data lacks.
    Returns a new dict; `raw` is not modified.
    """
    start = _version_key(from_version)
    data = copy.deepcopy(raw)

    for version, path, renames in VALUE_RENAMES:
        if _version_key(version) > start:
            value = _get_path(data, path)
            if isinstance(value, str) and value in renames:
                _set_path(data, path, renames[value])

    for version, path, default in MIGRATIONS:
        if _version_key(version) <= start:
            continue
        if _get_path(data, path) is _MISSING:
            value = default(data) if callable(default) else copy.deepcopy(default)
            _set_path(data, path, value)
            logger.debug(f"Migrated {path} to default {value!r}")

    data['version'] = CURRENT_VERSION
    return data


# =============================================================================
# VALIDATION
# =============================================================================

def _check_type(value, expected: type, where: str):
    # bool is a subclass of int; never accept one for the other
    if expected is int and (isinstance(value, bool) or not isinstance(value, int)):
        raise InvalidSaveData(f"{where} must be an integer, got {value!r}")
    if expected is bool and not isinstance(value, bool):
        raise InvalidSaveData(f"{where} must be a boolean, got {value!r}")
    if expected is str and not isinstance(value, str):
        raise InvalidSaveData(f"{where} must be a string, got {value!r}")


def _check_keys(section: Any, expected: Tuple[str, ...], where: str):
    if not isinstance(section, dict):
        raise InvalidSaveData(f"{where} must be an object")
    missing = [key for key in expected if key not in section]
    if missing:
        raise InvalidSaveData(f"{where} is missing {', '.join(missing)}")
    unknown = [key for key in section if key not in expected]
    if unknown:
        raise InvalidSaveData(f"{where} has unknown fields {', '.join(unknown)}")


def _check_enum(value, allowed: Tuple[str, ...], where: str):
    if value not in allowed:
        raise InvalidSaveData(f"{where} must be one of {', '.join(allowed)}, got {value!r}")


def validate_required(raw: Any):
    """Check the fields every save version carries."""
    if not isinstance(raw, dict):
        raise InvalidSaveData("Save data must be an object")
    for path, expected in REQUIRED_V1_FIELDS:
        value = _get_path(raw, path)
        if value is _MISSING:
            raise InvalidSaveData(f"Missing required field {path}")
        _check_type(value, expected, path)


def _validate_member(member: Any, where: str):
    _check_keys(member, MEMBER_FIELDS, where)
    for key in ('id', 'name'):
        _check_type(member[key], str, f"{where}.{key}")
    _check_enum(member['rarity'], RARITIES, f"{where}.rarity")
    _check_keys(member['base_stats'], BASE_STAT_FIELDS, f"{where}.base_stats")
    for key in BASE_STAT_FIELDS:
        _check_type(member['base_stats'][key], int, f"{where}.base_stats.{key}")
    for key in ('level', 'experience', 'hiring_cost', 'salary'):
        _check_type(member[key], int, f"{where}.{key}")

    traits = member['traits']
    if not isinstance(traits, list):
        raise InvalidSaveData(f"{where}.traits must be a list")
    for trait in traits:
        _check_enum(trait, TRAITS, f"{where}.traits")
    if len(set(traits)) != len(traits):
        raise InvalidSaveData(f"{where}.traits has duplicates")


def validate(data: Any):
    """Full structural validation of current-version save data."""
    _check_keys(data, TOP_LEVEL_FIELDS, 'save')

    for section, fields in SECTION_FIELDS.items():
        _check_keys(data[section], fields, section)
        for name in fields:
            path = f"{section}.{name}"
            _check_type(data[section][name], bool if path in BOOLEAN_FIELDS else int, path)

    _check_keys(data['equipment'], EQUIPMENT_KINDS, 'equipment')
    for kind in EQUIPMENT_KINDS:
        track = data['equipment'][kind]
        _check_keys(track, ('kind', 'level', 'max_level'), f"equipment.{kind}")
        if track['kind'] != kind:
            raise InvalidSaveData(f"equipment.{kind}.kind must be {kind!r}")
        _check_type(track['level'], int, f"equipment.{kind}.level")
        _check_type(track['max_level'], int, f"equipment.{kind}.max_level")

    _check_enum(data['archetype'], ARCHETYPES, 'archetype')
    _check_enum(data['difficulty'], DIFFICULTIES, 'difficulty')
    _check_enum(data['game_status'], GAME_STATUSES, 'game_status')
    _check_type(data['reputation'], int, 'reputation')
    _check_type(data['version'], str, 'version')
    for key in ('game_over_reason', 'ending_type'):
        if data[key] is not None:
            _check_type(data[key], str, key)

    for key in ('team', 'hiring_pool'):
        if not isinstance(data[key], list):
            raise InvalidSaveData(f"{key} must be a list")
        for index, member in enumerate(data[key]):
            _validate_member(member, f"{key}[{index}]")


# =============================================================================
# SERIALIZE / DESERIALIZE
# =============================================================================

def serialize(state: GameState) -> Dict[str, Any]:
    """
    Turn a GameState into JSON-compatible plain data stamped with the
    current version. The state itself is not modified.

    Raises:
        SerializationFailure: Not a GameState, or it holds values that
            cannot round-trip.
    """
    if not isinstance(state, GameState):
        raise SerializationFailure(f"Expected GameState, got {type(state).__name__}")

    try:
        data = state.to_dict()
    except (TypeError, ValueError) as e:
        raise SerializationFailure(f"Could not convert state: {e}") from e
    data['version'] = CURRENT_VERSION

    try:
        validate(data)
        json.dumps(data)
    except InvalidSaveData as e:
        raise SerializationFailure(str(e)) from e
    except (TypeError, ValueError) as e:
        raise SerializationFailure(f"State is not JSON-compatible: {e}") from e

    return data


def deserialize(raw: Any) -> GameState:
    """
    Validate, migrate and rebuild a GameState from plain data.

    Raises:
        InvalidSaveData: The data is malformed or from a newer version.
    """
    validate_required(raw)

    version = raw.get('version', LEGACY_VERSION)
    if not isinstance(version, str):
        raise InvalidSaveData(f"version must be a string, got {version!r}")
    if _version_key(version) > _version_key(CURRENT_VERSION):
        raise InvalidSaveData(f"Save version {version} is newer than {CURRENT_VERSION}")

    data = migrate(raw, version)
    validate(data)

    state = GameState.from_dict(data)
    state._clamp_all_values()
    return state


def dumps(state: GameState) -> str:
    return json.dumps(serialize(state), indent=2)


def loads(text: str) -> GameState:
    try:
        raw = json.loads(text)
    except (TypeError, ValueError) as e:
        raise InvalidSaveData(f"Save is not valid JSON: {e}") from e
    return deserialize(raw)


# =============================================================================
# EXPORT CODES
# A portable base64 string wrapping {version, timestamp, state}.
# =============================================================================

def export_save(state: GameState) -> str:
    envelope = {
        'version': CURRENT_VERSION,
        'timestamp': int(time.time() * 1000),
        'state': serialize(state),
    }
    return base64.b64encode(json.dumps(envelope).encode('utf-8')).decode('ascii')


def import_save(encoded: str) -> GameState:
    if not isinstance(encoded, str) or not encoded.strip():
        raise InvalidSaveData("Save code is empty")
    try:
        envelope = json.loads(base64.b64decode(encoded.strip(), validate=True).decode('utf-8'))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise InvalidSaveData(f"Save code is corrupt: {e}") from e
    if not isinstance(envelope, dict) or not isinstance(envelope.get('state'), dict):
        raise InvalidSaveData("Save code has no state")
    return deserialize(envelope['state'])


# =============================================================================
# SAVE SLOTS
# =============================================================================

SLOT_FILE = re.compile(r"save_(\d+)\.json")


def _slot_path(slot: int, save_dir: Optional[Path]) -> Path:
    return (save_dir or SAVE_DIR) / f"save_{slot}.json"


def ensure_save_dir(save_dir: Optional[Path] = None) -> Path:
    """Ensure save directory exists."""
    directory = save_dir or SAVE_DIR
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def save_game(state: GameState, slot: int = 1, save_dir: Optional[Path] = None) -> Path:
    """Serialize GameState to a JSON slot file."""
    ensure_save_dir(save_dir)
    save_path = _slot_path(slot, save_dir)

    with open(save_path, 'w') as f:
        f.write(dumps(state))

    return save_path


def load_game(slot: int = 1, save_dir: Optional[Path] = None) -> Optional[GameState]:
    """
    Load a slot. Returns None for an empty slot.

    Raises:
        InvalidSaveData: The slot file exists but does not hold a valid save.
    """
    save_path = _slot_path(slot, save_dir)

    if not save_path.exists():
        return None

    with open(save_path, 'r') as f:
        text = f.read()

    try:
        return loads(text)
    except InvalidSaveData as e:
        logger.warning(f"Could not load {save_path}: {e}")
        raise


def list_saves(save_dir: Optional[Path] = None) -> List[int]:
    """Slot numbers that hold a save file, in order."""
    directory = save_dir or SAVE_DIR
    if not directory.is_dir():
        return []
    matches = (SLOT_FILE.fullmatch(path.name) for path in directory.iterdir())
    return sorted(int(m.group(1)) for m in matches if m)


def delete_save(slot: int, save_dir: Optional[Path] = None) -> bool:
    """Remove a slot file. Returns False when the slot was already empty."""
    try:
        _slot_path(slot, save_dir).unlink()
    except FileNotFoundError:
        return False
    logger.info(f"Deleted save slot {slot}")
    return True
