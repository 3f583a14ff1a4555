#!/usr/bin/env python3
"""
Export state tracking for the grimoire PDF exporter.
Records which source produced which PDF so unchanged grimoires are not rendered again.

MIT License - Copyright (c) 2025 Grimoire PDF Exporter
"""

import sqlite3
import hashlib
from pathlib import Path
from typing import Any, Dict, List, Optional

_CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS export_state (
        filename TEXT PRIMARY KEY,
        source_hash TEXT NOT NULL,
        pdf_hash TEXT,
        page_margins TEXT,
        include_images INTEGER DEFAULT 0,
        renderer TEXT DEFAULT 'browser',
        brand TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
"""

_COLUMNS = ("filename", "source_hash", "pdf_hash", "page_margins", "include_images",
            "renderer", "brand", "created_at", "updated_at")

# Columns added after the first release; older databases get them on open
_ADDED_COLUMNS = (("brand", "TEXT"),)


class ExportStateManager:
    """Manages export state using SQLite database to avoid unnecessary PDF renders."""

    def __init__(self, db_path: str):
        """Initialize the export state manager.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

    def _init_database(self) -> None:
        """Initialize the SQLite database and create the export_state table."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(_CREATE_TABLE)
                existing = {row[1] for row in conn.execute("PRAGMA table_info(export_state)")}
                for column, column_type in _ADDED_COLUMNS:
                    if column not in existing:
                        conn.execute(f"ALTER TABLE export_state ADD COLUMN {column} {column_type}")
                conn.commit()
        except sqlite3.Error as e:
            raise RuntimeError(f"Failed to initialize database: {e}")

    def get_export_state(self, filename: str) -> Optional[Dict[str, Any]]:
        """Get export state from database.

        Args:
            filename: Name of the grimoire source file

        Returns:
            Dictionary with every export_state column, or None if not found
        """
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(f"SELECT {', '.join(_COLUMNS)} FROM export_state WHERE filename = ?", (filename,))
                result = cursor.fetchone()
                return dict(zip(_COLUMNS, result)) if result else None
        except sqlite3.Error as e:
            raise RuntimeError(f"Failed to get export state: {e}")

    def save_export_state(self, filename: str, source_hash: str, pdf_hash: Optional[str] = None,
                          page_margins: Optional[str] = None, include_images: bool = False,
                          renderer: str = "browser", brand: Optional[str] = None) -> None:
        """Save export state to database.

        Args:
            filename: Name of the grimoire source file
            source_hash: SHA-256 hash of the source file
            pdf_hash: SHA-256 hash of the generated PDF (optional)
            page_margins: Page margins used for the render
            include_images: Whether images were kept in the render
            renderer: 'browser' or 'fallback'
            brand: Brand printed in the footer and colophon
        """
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute("""
                    INSERT INTO export_state
                    (filename, source_hash, pdf_hash, page_margins, include_images, renderer, brand, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, CURRENT_TIMESTAMP)
                    ON CONFLICT(filename) DO UPDATE SET
                        source_hash = excluded.source_hash,
                        pdf_hash = excluded.pdf_hash,
                        page_margins = excluded.page_margins,
                        include_images = excluded.include_images,
                        renderer = excluded.renderer,
                        brand = excluded.brand,
                        updated_at = CURRENT_TIMESTAMP
                """, (filename, source_hash, pdf_hash, page_margins, 1 if include_images else 0, renderer, brand))
                conn.commit()
        except sqlite3.Error as e:
            raise RuntimeError(f"Failed to save export state: {e}")

    def needs_regeneration(self, filename: str, current_source_hash: str, pdf_path: Path,
                           current_page_margins: Optional[str] = None,
                           current_include_images: bool = False,
                           current_brand: Optional[str] = None) -> bool:
        """Check if a PDF needs to be rendered again.

        A grimoire is rendered again when it was never exported, its source
        changed, the render settings (margins, images, brand) changed, the
        last render used the fallback renderer, or the PDF on disk is missing
        or was modified.
        """
        state = self.get_export_state(filename)

        if not state:
            return True

        if state['source_hash'] != current_source_hash:
            return True

        if state['page_margins'] != current_page_margins:
            return True

        if state['include_images'] != (1 if current_include_images else 0):
            return True

        if state['brand'] != current_brand:
            return True

        # Fallback output is a stopgap; retry the browser next run
        if state['renderer'] != 'browser':
            return True

        if not state['pdf_hash']:
            return True

        return not verify_pdf_exists_and_matches(pdf_path, state['pdf_hash'])

    def update_pdf_hash(self, filename: str, pdf_hash: str) -> None:
        """Update only the PDF hash for an existing export."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute("""
                    UPDATE export_state
                    SET pdf_hash = ?, updated_at = CURRENT_TIMESTAMP
                    WHERE filename = ?
                """, (pdf_hash, filename))
                conn.commit()
        except sqlite3.Error as e:
            raise RuntimeError(f"Failed to update PDF hash: {e}")

    def get_all_exports(self) -> List[Dict[str, Any]]:
        """Get all export states, most recently updated first."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(f"SELECT {', '.join(_COLUMNS)} FROM export_state ORDER BY updated_at DESC, filename")
                return [dict(zip(_COLUMNS, row)) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise RuntimeError(f"Failed to get all exports: {e}")

    def remove_export(self, filename: str) -> None:
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute("DELETE FROM export_state WHERE filename = ?", (filename,))
                conn.commit()
        except sqlite3.Error as e:
            raise RuntimeError(f"Failed to remove export: {e}")

    def clear_all_exports(self) -> int:
        """Clear all exports and recreate the table with current schema.

        Returns:
            Number of records removed
        """
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT COUNT(*) FROM export_state")
                count = cursor.fetchone()[0]
                cursor.execute("DROP TABLE IF EXISTS export_state")
                cursor.execute(_CREATE_TABLE)
                conn.commit()
                return count
        except sqlite3.Error as e:
            raise RuntimeError(f"Failed to clear all exports: {e}")


def calculate_file_hash(file_path: Path) -> str:
    """Calculate SHA-256 hash of a file.

    Raises:
        RuntimeError: If file cannot be read
    """
    sha256_hash = hashlib.sha256()
    try:
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(4096), b""):
                sha256_hash.update(chunk)
        return sha256_hash.hexdigest()
    except OSError as e:
        raise RuntimeError(f"Failed to calculate hash for {file_path}: {e}")


def verify_pdf_exists_and_matches(pdf_path: Path, expected_hash: str) -> bool:
    """Verify that a PDF file exists and matches the expected hash."""
    if not pdf_path.exists():
        return False

    try:
        return calculate_file_hash(pdf_path) == expected_hash
    except RuntimeError:
        return False
