"""Serialize analysis results to report formats.

Nothing in the core depends on these formats; they mirror the reports
screenwriters hand to art and lighting departments.
"""

import csv
import io
import json
import re
from pathlib import Path

from .models.entities import Role
from .models.result import AnalysisResult


FORMATS = ("json", "markdown", "text", "csv")

SCENE_TYPE_LABELS = {"indoor": "室内", "outdoor": "室外", "other": "其他"}

# Path separators and characters Windows refuses in file names
_UNSAFE_FILENAME_RE = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def _scene_type(value) -> str:
    return SCENE_TYPE_LABELS.get(getattr(value, "value", value), str(value))


def safe_filename(name: str) -> str:
    """Turn a free-text label into a single file name component."""
    cleaned = _UNSAFE_FILENAME_RE.sub("_", name).strip(" .")
    return cleaned or "result"


def to_json(result: AnalysisResult, indent: int = 2) -> str:
    return json.dumps(result.to_dict(), ensure_ascii=False, indent=indent)


def summary(result: AnalysisResult) -> str:
    """Short plain-text report for pasting elsewhere."""
    lines = [f"【剧本分析报告 - {result.style}】", "", "一、人物设定"]
    for idx, c in enumerate(result.characters, start=1):
        lines.append(f"{idx}. {c.name}：{c.identity}。{c.description}")

    lines += ["", "二、场景清单"]
    for idx, s in enumerate(result.scenes, start=1):
        lines.append(f"{idx}. {s.name} ({_scene_type(s.type)}/{s.time})：{s.description}")

    if result.props:
        lines += ["", "三、关键道具"]
        for p in result.props:
            lines.append(f"· {p.name}：{p.description}")

    return "\n".join(lines) + "\n"


def to_markdown(result: AnalysisResult) -> str:
    md = [f"# {result.style} - 剧本设定分析报告", "", "## 1. 人物角色", ""]
    for c in result.characters:
        md.append(f"### {c.name} ({c.identity})")
        md.append(f"- **角色类型**: {'主角' if c.role == Role.MAIN else '配角'}")
        md.append(f"- **外貌描述**: {c.gender} | {c.hairstyle} | {c.clothing}")
        md.append(f"- **视觉细节**: {c.description}")
        md.append("- **画面指令**:")
        md.extend(f"  - {v}" for v in c.visual_states)
        md.append("")

    md += ["## 2. 场景设定", ""]
    for s in result.scenes:
        md.append(f"### {s.name}")
        md.append(f"- **类型**: {_scene_type(s.type)} | **时间**: {s.time} | **机位**: {s.angle}")
        md.append(f"- **场景描述**: {s.description}")
        md.append("- **分镜细节**:")
        md.extend(f"  - {v}" for v in s.visual_states)
        md.append("")

    md += ["## 3. 道具物品", ""]
    md.extend(f"- **{p.name}**: (用途: {p.usage}) {p.description}" for p in result.props)
    md.append("")

    md += ["## 4. 灯光氛围", ""]
    md.extend(f"- **{l.type}**: (颜色: {l.color} | 氛围: {l.mood}) {l.description}" for l in result.lighting)
    md.append("")

    md += ["## 5. 技能招式", ""]
    md.extend(f"- **{sk.name}** (使用者: {sk.owner}): {sk.effect} - {sk.description}" for sk in result.skills)
    md.append("")

    return "\n".join(md)


def to_text(result: AnalysisResult) -> str:
    txt = [f"剧本设定分析报告 - {result.style}", "=" * 36, "", "【人物角色】"]
    for c in result.characters:
        txt.append(f"{c.name} [{c.identity}]")
        txt.append(f"特征: {c.gender}, {c.clothing}")
        txt.append(f"描述: {c.description}")
        txt.append(f"画面关键词: {', '.join(c.visual_states)}")
        txt.append("")

    txt.append("【场景设定】")
    for s in result.scenes:
        txt.append(f"{s.name} ({_scene_type(s.type)}/{s.time})")
        txt.append(f"描述: {s.description}")
        txt.append(f"机位: {s.angle}")
        txt.append(f"细节: {', '.join(s.visual_states)}")
        txt.append("")

    return "\n".join(txt)


def _csv(header: list[str], rows: list[list[str]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    # BOM so spreadsheet apps detect UTF-8
    return "\ufeff" + buffer.getvalue()


def to_csv_pack(result: AnalysisResult) -> dict[str, str]:
    """Three CSV documents keyed by file name."""
    characters = _csv(
        ["姓名", "身份", "角色类型", "性别", "发型", "服装", "描述", "画面指令"],
        [
            [c.name, c.identity, c.role.value, c.gender, c.hairstyle, c.clothing,
             c.description, "|".join(c.visual_states)]
            for c in result.characters
        ],
    )
    scenes = _csv(
        ["名称", "类型", "时间", "机位", "描述", "细节"],
        [
            [s.name, _scene_type(s.type), s.time, s.angle, s.description, "|".join(s.visual_states)]
            for s in result.scenes
        ],
    )
    props = _csv(
        ["名称", "用途", "描述"],
        [[p.name, p.usage, p.description] for p in result.props],
    )
    return {
        "1_人物角色.csv": characters,
        "2_场景设定.csv": scenes,
        "3_道具物品.csv": props,
    }


def write_exports(result: AnalysisResult, output_dir: Path, formats=FORMATS) -> list[Path]:
    """Write the requested formats into ``output_dir``.

    Returns:
        Paths written, in the order of ``formats``
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    stem = f"剧本分析_{safe_filename(result.style)}"
    written: list[Path] = []

    for fmt in formats:
        if fmt == "json":
            documents = {f"{stem}.json": to_json(result)}
        elif fmt == "markdown":
            documents = {f"{stem}.md": to_markdown(result)}
        elif fmt == "text":
            documents = {f"{stem}.txt": to_text(result)}
        elif fmt == "csv":
            documents = to_csv_pack(result)
        else:
            raise ValueError(f"Unsupported export format: {fmt}")

        for name, content in documents.items():
            path = output_dir / name
            path.write_text(content, encoding="utf-8")
            written.append(path)

    return written
