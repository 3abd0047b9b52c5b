#!/usr/bin/env python3
"""
Pre-commit hook to detect a hardcoded OMDb API key.

The key belongs in the PMOVIES_OMDB_API_KEY environment variable (or an
uncommitted .env file). This hook fails the commit when a key shows up in
source, in a request URL or in a committed env file.
"""

import re
import sys
from typing import List, Tuple

# OMDb keys are 8 hex-ish characters, but anything long enough is suspicious
KEY_VALUE = r'[A-Za-z0-9]{6,}'

# Patterns that indicate a committed key
CREDENTIAL_PATTERNS = [
    # Request URLs carrying the key
    (r'[?&]apikey=' + KEY_VALUE, "OMDb URL with API key"),

    # Env files and shell exports
    (r'PMOVIES_OMDB_API_KEY\s*=\s*["\']?' + KEY_VALUE, "OMDb API key assignment"),

    # Python assignments and keyword arguments
    (r'omdb_api_key\s*[=:]\s*["\'][^"\']{6,}["\']', "hardcoded OMDb API key"),
    (r'api_?key\s*[=:]\s*["\'][^"\']{6,}["\']', "hardcoded API key"),
    (r'["\']apikey["\']\s*:\s*["\'][^"\']{6,}["\']', "hardcoded API key in params"),

    # Private keys
    (r'-----BEGIN (RSA |EC )?PRIVATE KEY-----', "private key"),
]

# Patterns that are safe (exclude false positives)
SAFE_PATTERNS = [
    r'["\']?test-key["\']?',             # Test value
    r'["\']?changeme["\']?',             # Placeholder
    r'["\']?your[-_]?api[-_]?key["\']?', # Documentation placeholder
    r'<[^>]*>',                          # Template
    r'\$\{[^}]*\}',                      # Template variable
    r'os\.getenv|os\.environ',           # From environment
    r'settings\.omdb_api_key',           # From settings
]


def is_safe_match(line: str) -> bool:
    """Check if the line matches a safe pattern (false positive)."""
    return any(re.search(pattern, line, re.IGNORECASE) for pattern in SAFE_PATTERNS)


def check_line(line: str) -> str:
    """Return the violation type found on a line, or an empty string."""
    if is_safe_match(line):
        return ""

    for pattern, violation_type in CREDENTIAL_PATTERNS:
        if re.search(pattern, line, re.IGNORECASE):
            return violation_type
    return ""


def check_file(filepath: str) -> List[Tuple[int, str, str]]:
    """
    Check a file for credential patterns.
    Returns list of (line_number, line_content, violation_type).
    """
    violations = []

    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            for line_num, line in enumerate(f, start=1):
                violation_type = check_line(line)
                if violation_type:
                    violations.append((line_num, line.strip(), violation_type))
    except UnicodeDecodeError:
        # Binary files such as poster images
        pass
    except OSError as e:
        print(f"Warning: Could not read {filepath}: {e}", file=sys.stderr)

    return violations


def main(filenames: List[str]) -> int:
    """
    Check files for a hardcoded API key.
    Returns 0 if none found, 1 otherwise.
    """
    all_violations = {}

    for filename in filenames:
        violations = check_file(filename)
        if violations:
            all_violations[filename] = violations

    if not all_violations:
        return 0

    print("ERROR: Hardcoded OMDb credentials detected!\n")

    for filepath, violations in all_violations.items():
        print(f"{filepath}:")
        for line_num, line_content, violation_type in violations:
            print(f"   Line {line_num}: {violation_type}")
            print(f"   > {line_content}")
        print()

    print("Set the key through the environment instead:")
    print("  export PMOVIES_OMDB_API_KEY=...")
    print("and read it with get_settings().omdb_api_key.")
    return 1


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
