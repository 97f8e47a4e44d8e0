##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Table definitions for the crispr_db SQLite schema.

The schema is fixed: one table per entity type with a single auto-incrementing
primary key, foreign key columns for references and junction tables for
many-to-many associations. `create_schema` creates whatever is missing and
seeds the status vocabulary.
"""

import logging
from typing import Dict

from crispr_db.backends.sqlite.sqlite_connection import DBConnection
from crispr_db.common.enums import Status


LOG = logging.getLogger(__name__)

# Ordered so that every table is created after the tables it references
TABLES: Dict[str, str] = {
    "status": """
        CREATE TABLE IF NOT EXISTS status (
            status_id INTEGER PRIMARY KEY,
            status TEXT NOT NULL UNIQUE
        )
    """,
    "plate": """
        CREATE TABLE IF NOT EXISTS plate (
            plate_id INTEGER PRIMARY KEY AUTOINCREMENT,
            plate_name TEXT NOT NULL UNIQUE,
            plate_type TEXT,
            plate_category TEXT
        )
    """,
    "target": """
        CREATE TABLE IF NOT EXISTS target (
            target_id INTEGER PRIMARY KEY AUTOINCREMENT,
            target_name TEXT NOT NULL,
            assembly TEXT,
            chr TEXT,
            start INTEGER NOT NULL,
            "end" INTEGER NOT NULL,
            strand TEXT NOT NULL,
            species TEXT,
            requires_enzyme INTEGER,
            gene_id TEXT,
            gene_name TEXT,
            requestor TEXT NOT NULL,
            ensembl_version INTEGER,
            status_id INTEGER REFERENCES status (status_id),
            status_changed TEXT,
            UNIQUE (target_name, requestor)
        )
    """,
    "crRNA": """
        CREATE TABLE IF NOT EXISTS crRNA (
            crRNA_id INTEGER PRIMARY KEY AUTOINCREMENT,
            crRNA_name TEXT NOT NULL,
            chr TEXT,
            start INTEGER NOT NULL,
            "end" INTEGER NOT NULL,
            strand TEXT NOT NULL,
            sequence TEXT NOT NULL,
            num_five_prime_Gs INTEGER NOT NULL,
            score REAL,
            off_target_score REAL,
            coding_score REAL,
            target_id INTEGER NOT NULL REFERENCES target (target_id),
            plate_id INTEGER REFERENCES plate (plate_id),
            well_id TEXT,
            status_id INTEGER REFERENCES status (status_id),
            status_changed TEXT
        )
    """,
    "coding_scores": """
        CREATE TABLE IF NOT EXISTS coding_scores (
            crRNA_id INTEGER NOT NULL REFERENCES crRNA (crRNA_id),
            transcript_id TEXT NOT NULL,
            score REAL NOT NULL,
            PRIMARY KEY (crRNA_id, transcript_id)
        )
    """,
    "off_target_info": """
        CREATE TABLE IF NOT EXISTS off_target_info (
            crRNA_id INTEGER NOT NULL REFERENCES crRNA (crRNA_id),
            off_target_hit TEXT NOT NULL,
            mismatches INTEGER,
            annotation TEXT
        )
    """,
    "plasmid_backbone": """
        CREATE TABLE IF NOT EXISTS plasmid_backbone (
            plasmid_backbone_id INTEGER PRIMARY KEY AUTOINCREMENT,
            plasmid_backbone TEXT NOT NULL UNIQUE
        )
    """,
    "expression_construct": """
        CREATE TABLE IF NOT EXISTS expression_construct (
            crRNA_id INTEGER NOT NULL REFERENCES crRNA (crRNA_id),
            plate_id INTEGER NOT NULL REFERENCES plate (plate_id),
            well_id TEXT NOT NULL,
            trace_file TEXT,
            construct_sequence_verified INTEGER,
            plasmid_backbone_id INTEGER NOT NULL REFERENCES plasmid_backbone (plasmid_backbone_id),
            PRIMARY KEY (plate_id, well_id)
        )
    """,
    "construction_oligos": """
        CREATE TABLE IF NOT EXISTS construction_oligos (
            crRNA_id INTEGER NOT NULL REFERENCES crRNA (crRNA_id),
            forward_oligo TEXT NOT NULL,
            reverse_oligo TEXT,
            plasmid_backbone_id INTEGER REFERENCES plasmid_backbone (plasmid_backbone_id),
            plate_id INTEGER NOT NULL REFERENCES plate (plate_id),
            well_id TEXT NOT NULL,
            PRIMARY KEY (plate_id, well_id)
        )
    """,
    "primer": """
        CREATE TABLE IF NOT EXISTS primer (
            primer_id INTEGER PRIMARY KEY AUTOINCREMENT,
            primer_sequence TEXT NOT NULL,
            primer_chr TEXT,
            primer_start INTEGER,
            primer_end INTEGER,
            primer_strand TEXT,
            primer_tail TEXT,
            plate_id INTEGER REFERENCES plate (plate_id),
            well_id TEXT
        )
    """,
    "primer_pair": """
        CREATE TABLE IF NOT EXISTS primer_pair (
            primer_pair_id INTEGER PRIMARY KEY AUTOINCREMENT,
            type TEXT NOT NULL,
            left_primer_id INTEGER NOT NULL REFERENCES primer (primer_id),
            right_primer_id INTEGER NOT NULL REFERENCES primer (primer_id),
            chr TEXT,
            start INTEGER,
            "end" INTEGER,
            strand TEXT,
            product_size INTEGER
        )
    """,
    "amplicon_to_crRNA": """
        CREATE TABLE IF NOT EXISTS amplicon_to_crRNA (
            primer_pair_id INTEGER NOT NULL REFERENCES primer_pair (primer_pair_id),
            crRNA_id INTEGER NOT NULL REFERENCES crRNA (crRNA_id),
            PRIMARY KEY (primer_pair_id, crRNA_id)
        )
    """,
    "enzyme": """
        CREATE TABLE IF NOT EXISTS enzyme (
            enzyme_id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE,
            site TEXT NOT NULL
        )
    """,
    "restriction_enzymes": """
        CREATE TABLE IF NOT EXISTS restriction_enzymes (
            primer_pair_id INTEGER NOT NULL REFERENCES primer_pair (primer_pair_id),
            crRNA_id INTEGER NOT NULL REFERENCES crRNA (crRNA_id),
            enzyme_id INTEGER NOT NULL REFERENCES enzyme (enzyme_id),
            proximity_to_crRNA INTEGER,
            fragment_sizes TEXT,
            PRIMARY KEY (primer_pair_id, crRNA_id, enzyme_id)
        )
    """,
    "injection": """
        CREATE TABLE IF NOT EXISTS injection (
            injection_id INTEGER PRIMARY KEY AUTOINCREMENT,
            injection_name TEXT NOT NULL UNIQUE,
            cas9_type TEXT,
            cas9_concentration REAL,
            date TEXT,
            line_injected TEXT,
            line_raised TEXT,
            sorted_by TEXT
        )
    """,
    "injection_pool": """
        CREATE TABLE IF NOT EXISTS injection_pool (
            injection_id INTEGER NOT NULL REFERENCES injection (injection_id),
            crRNA_id INTEGER NOT NULL REFERENCES crRNA (crRNA_id),
            guideRNA_type TEXT,
            guideRNA_concentration REAL,
            PRIMARY KEY (injection_id, crRNA_id)
        )
    """,
    "subplex": """
        CREATE TABLE IF NOT EXISTS subplex (
            subplex_id INTEGER PRIMARY KEY AUTOINCREMENT,
            plex_name TEXT,
            plate_num INTEGER,
            injection_id INTEGER REFERENCES injection (injection_id)
        )
    """,
    "sample": """
        CREATE TABLE IF NOT EXISTS sample (
            sample_id INTEGER PRIMARY KEY AUTOINCREMENT,
            sample_name TEXT NOT NULL UNIQUE,
            injection_id INTEGER NOT NULL REFERENCES injection (injection_id),
            subplex_id INTEGER NOT NULL REFERENCES subplex (subplex_id),
            well_id TEXT,
            barcode_id INTEGER,
            generation TEXT,
            type TEXT,
            species TEXT
        )
    """,
    "sequencing_results": """
        CREATE TABLE IF NOT EXISTS sequencing_results (
            sample_id INTEGER NOT NULL REFERENCES sample (sample_id),
            crRNA_id INTEGER NOT NULL REFERENCES crRNA (crRNA_id),
            fail INTEGER NOT NULL DEFAULT 0,
            num_indels INTEGER,
            total_percentage_of_reads REAL,
            percentage_major_variant REAL,
            pass INTEGER NOT NULL DEFAULT 0,
            PRIMARY KEY (sample_id, crRNA_id)
        )
    """,
}


def create_schema(connection: DBConnection):
    """
    Create every table that doesn't exist yet and seed the status vocabulary.

    Args:
        connection: The connection to create the tables through.
    """
    LOG.debug(f"Ensuring the crispr_db schema exists in {connection.db_path}...")
    with connection.transaction():
        for statement in TABLES.values():
            connection.execute(statement)
        for status in Status:
            connection.execute(
                "INSERT OR IGNORE INTO status (status_id, status) VALUES (?, ?)",
                [status.value, status.name],
            )
    LOG.debug("Schema is up to date.")
