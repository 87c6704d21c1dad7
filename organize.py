import os
import shutil
from typing import Dict, List

from classify import default_class_names
from errors import OrganizeError


def safe_dir_name(name: str) -> str:
    return name.replace("/", "_").replace("\\", "_").strip()


def resolve_dir_names(class_names: List[str]) -> List[str]:
    """Directory name per class; blank or repeated names fall back to "Class i"."""
    fallback = default_class_names(len(class_names))
    seen = set()
    dir_names = []
    for i, name in enumerate(class_names):
        name = safe_dir_name(name)
        if not name or name in seen:
            name = fallback[i]
        seen.add(name)
        dir_names.append(name)
    return dir_names


def update_target_dir(directory: str, image_paths: List[str], class_names: List[str],
                      table: List[List[int]], dry_run: bool = False) -> Dict[str, List[str]]:
    """
    Move every clustered image into `directory/<class name>/`.

    Empty classes get no directory. Returns {class_dir: [moved destination paths]}.
    """
    moved: Dict[str, List[str]] = {}
    dir_names = resolve_dir_names(class_names)

    for i, row in enumerate(table):
        if not row:
            continue

        class_dir = os.path.join(directory, dir_names[i])
        if not dry_run:
            try:
                os.makedirs(class_dir, exist_ok=True)
            except OSError as e:
                raise OrganizeError(f"Could not create {class_dir}: {e}") from e

        dsts = []
        for image_index in row:
            src = image_paths[image_index]
            dst = os.path.join(class_dir, os.path.basename(src))
            if not dry_run:
                try:
                    shutil.move(src, dst)
                except OSError as e:
                    raise OrganizeError(f"Could not move {src} -> {dst}: {e}") from e
            dsts.append(dst)
        moved[class_dir] = dsts

    return moved


# -----------------------------
# Reports
# -----------------------------

def format_classified_images(table: List[List[int]], image_paths: List[str],
                             class_names: List[str]) -> str:
    fallback = default_class_names(len(table))
    lines = []
    for i, row in enumerate(table):
        lines.append(f"{class_names[i] or fallback[i]}:")
        for image_index in row:
            lines.append(f"\t=> {image_paths[image_index]}")
        lines.append("")
    return "\n".join(lines)


def format_missed_images(missed_image_paths: List[str]) -> str:
    lines = ["The following images failed to process:"]
    for path in missed_image_paths:
        lines.append(f"\t=> {path}")
    return "\n".join(lines)
