import re
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]  # repo root
DCF = ROOT / "costing_tool" / "finance" / "dcf.py"

EXCLUDE_DIRS = {
    ".venv", "venv", ".git", ".pytest_cache", "build",
    "dist", "__pycache__", ".mypy_cache", ".tox", ".eggs"
}

NAMES = ("npv", "discount_factor", "discount_divisor", "discount_divisors")


def _skip(p: Path) -> bool:
    parts = set(p.parts)
    if "site-packages" in parts or "dist-packages" in parts:
        return True
    if any(d in parts for d in EXCLUDE_DIRS):
        return True
    return False


def test_only_dcf_module_defines_discounting():
    hits = []
    pattern = re.compile(r"\bdef\s+(%s)\s*\(" % "|".join(NAMES))
    for p in ROOT.rglob("*.py"):
        if _skip(p):
            continue
        if p == DCF:
            continue
        text = p.read_text(encoding="utf-8", errors="ignore")
        if pattern.search(text):
            hits.append(str(p))
    assert not hits, f"Found discounting defs outside finance/dcf.py: {hits}"


def test_engine_does_not_compute_powers_itself():
    # (1 + r) ** n belongs in finance/dcf.py
    hits = []
    for p in (ROOT / "costing_tool" / "estimate").glob("*.py"):
        if re.search(r"\*\*\s*\(?\s*(year|offset)", p.read_text(encoding="utf-8")):
            hits.append(p.name)
    assert not hits, hits
