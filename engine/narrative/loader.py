from __future__ import annotations
import os
from typing import Any, Dict, List
import yaml

from engine.errors import ConfigError
from engine.narrative.conditions import parse_condition
from engine.narrative.types import (
    Choice, FlagValue, Node, NpcDef, QuestDef, Story, StorylineDef, TownContent, is_flag_value,
)


def _read_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return data


def _flag_map(raw: Any, where: str) -> Dict[str, FlagValue]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{where}: expected a mapping of flag -> value")
    out: Dict[str, FlagValue] = {}
    for name, value in raw.items():
        if not is_flag_value(value):
            raise ConfigError(f"{where}: flag '{name}' has unsupported value {value!r}")
        out[str(name)] = value
    return out


# --- town content -----------------------------------------------------------
def parse_town_content(data: Dict[str, Any], where: str = "<content>") -> TownContent:
    """
    Expects:
        flags:      { <name>: <initial value> }            (optional)
        storylines: { <id>: { npcs: { <npc id>: {props} } } }
        quests:     { <id>: { npc, icon, condition, done_when?, priority? } }
        players:    { <id>: {props} }                       (optional)
        start:      <storyline id>                          (optional)
    """
    raw_storylines = data.get("storylines")
    if not isinstance(raw_storylines, dict) or not raw_storylines:
        raise ConfigError(f"{where}: 'storylines' must be a non-empty mapping")

    storylines: Dict[str, StorylineDef] = {}
    for sid, body in raw_storylines.items():
        sid = str(sid)
        body = body or {}
        if not isinstance(body, dict):
            raise ConfigError(f"{where}: storyline '{sid}' must be a mapping")
        raw_npcs = body.get("npcs", {}) or {}
        if not isinstance(raw_npcs, dict):
            raise ConfigError(f"{where}: storyline '{sid}'.npcs must be a mapping")
        npcs: List[NpcDef] = []
        for npc_id, props in raw_npcs.items():
            props = props or {}
            if not isinstance(props, dict):
                raise ConfigError(f"{where}: npc '{sid}.{npc_id}' must be a mapping")
            npcs.append(NpcDef(id=str(npc_id), props=dict(props)))
        storylines[sid] = StorylineDef(id=sid, npcs=tuple(npcs))

    quests: List[QuestDef] = []
    raw_quests = data.get("quests", {}) or {}
    if not isinstance(raw_quests, dict):
        raise ConfigError(f"{where}: 'quests' must be a mapping")
    # YAML mappings keep file order; that order is the marker tie-break.
    for order, (qid, body) in enumerate(raw_quests.items()):
        qwhere = f"{where}: quest '{qid}'"
        if not isinstance(body, dict):
            raise ConfigError(f"{qwhere} must be a mapping")
        for key in ("npc", "icon", "condition"):
            if key not in body:
                raise ConfigError(f"{qwhere} is missing '{key}'")
        done_when = body.get("done_when")
        priority = body.get("priority", 0)
        if isinstance(priority, bool) or not isinstance(priority, int):
            raise ConfigError(f"{qwhere}: priority must be an integer, got {priority!r}")
        quests.append(QuestDef(
            id=str(qid),
            npc=str(body["npc"]),
            icon=str(body["icon"]),
            condition=parse_condition(body["condition"], f"{qwhere}.condition"),
            done_when=None if done_when is None else parse_condition(done_when, f"{qwhere}.done_when"),
            priority=priority,
            order=order,
        ))

    start = data.get("start")
    if start is not None and str(start) not in storylines:
        raise ConfigError(f"{where}: start storyline '{start}' is not defined")

    players = data.get("players", {}) or {}
    if not isinstance(players, dict):
        raise ConfigError(f"{where}: 'players' must be a mapping")
    for pid, props in players.items():
        if props is not None and not isinstance(props, dict):
            raise ConfigError(f"{where}: player '{pid}' must be a mapping")
    return TownContent(
        storylines=storylines,
        quests=tuple(quests),
        flags=_flag_map(data.get("flags"), f"{where}: flags"),
        players={str(k): dict(v or {}) for k, v in players.items()},
        start_storyline=None if start is None else str(start),
    )


def load_town_content(path: str) -> TownContent:
    return parse_town_content(_read_yaml(path), path)


# --- dialogues --------------------------------------------------------------
def _fq(ns: str, key: str) -> str:
    return f"{ns}.{key}"


def _normalize_goto(ns: str, raw: Any) -> Any:
    """
    Accepts None, empty, or string. If string is relative (no dot), qualify it with ns.
    """
    if raw is None:
        return None
    if not isinstance(raw, str) or raw.strip() == "":
        return None
    s = raw.strip()
    return s if "." in s else _fq(ns, s)


def parse_dialogue(data: Dict[str, Any], where: str = "<dialogue>") -> Story:
    """
    namespace: <str>
    nodes: { <key>: {say: <str or list>, speaker?: <npc id>,
                     choices: [{id?, text, goto?, set?: {flag: value}}]} }
    """
    ns = str(data.get("namespace", "")).strip()
    if not ns:
        raise ConfigError(f"{where}: Missing 'namespace'")

    raw_nodes = data.get("nodes", {})
    if not isinstance(raw_nodes, dict) or not raw_nodes:
        raise ConfigError(f"{where}: 'nodes' must be a non-empty mapping")

    nodes: Dict[str, Node] = {}
    first_fqid: str | None = None

    for key, body in raw_nodes.items():
        if not isinstance(body, dict):
            raise ConfigError(f"{where}: node '{key}' must be a mapping")

        say = body.get("say", "")
        if isinstance(say, list):
            say = "\n".join(str(s) for s in say)
        elif not isinstance(say, str):
            say = str(say or "")

        choices = []
        for idx, c in enumerate(body.get("choices", []) or []):
            if not isinstance(c, dict):
                raise ConfigError(f"{where}: node '{key}' choice {idx} must be a mapping")
            choices.append(Choice(
                id=str(c.get("id") or f"{key}.choice{idx}"),
                text=str(c.get("text") or ""),
                goto=_normalize_goto(ns, c.get("goto")),
                set_flags=_flag_map(c.get("set"), f"{where}: node '{key}' choice {idx}.set"),
            ))

        fqid = _fq(ns, key)
        speaker = body.get("speaker")
        nodes[fqid] = Node(fqid=fqid, namespace=ns, key=str(key), say=say,
                           speaker=None if speaker is None else str(speaker), choices=choices)
        if first_fqid is None:
            first_fqid = fqid

    for node in nodes.values():
        for c in node.choices:
            if c.goto and c.goto.split(".", 1)[0] == ns and c.goto not in nodes:
                raise ConfigError(f"{where}: '{node.fqid}' goes to missing node '{c.goto}'")

    return Story(nodes=nodes, start=first_fqid or "")


def load_dialogue_file(path: str) -> Story:
    return parse_dialogue(_read_yaml(path), path)


def load_dialogue_dir(path: str) -> Story:
    """Merge every *.yaml in `path` into one Story (node ids are namespaced)."""
    story = Story(nodes={}, start="")
    if not os.path.isdir(path):
        return story
    for name in sorted(os.listdir(path)):
        if name.endswith((".yaml", ".yml")):
            story = story.merge(load_dialogue_file(os.path.join(path, name)))
    return story
