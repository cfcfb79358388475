"""
Query Assistance Core

Schema-aware helpers used by every tool before and after it touches
the database:
    - assert_safe_identifier: identifier guard for interpolated names
    - edit_distance / rank_similar: approximate name matching
    - SchemaCache: TTL-bounded snapshot of table and column names
    - infer_structure: bounded shape summary of JSON values
    - classify / ensure_read_only / ensure_write_statement: query guards
    - ErrorEnhancer: suggestions for unknown table/column errors
"""

from pgassist.core.classifier import (
    QueryClassification,
    QueryKind,
    apply_row_cap,
    classify,
    ensure_read_only,
    ensure_write_statement,
)
from pgassist.core.enhancer import ErrorEnhancer, extract_table_name
from pgassist.core.errors import AssistError, InvalidIdentifierError, InvalidQueryKindError
from pgassist.core.identifiers import assert_safe_identifier, quote_identifier
from pgassist.core.schema_cache import SchemaCache, SchemaSnapshot
from pgassist.core.similarity import SimilarityCandidate, edit_distance, rank_similar
from pgassist.core.structure import StructureNode, decode_json_value, infer_structure

__all__ = [
    "AssistError",
    "InvalidIdentifierError",
    "InvalidQueryKindError",
    "assert_safe_identifier",
    "quote_identifier",
    "edit_distance",
    "rank_similar",
    "SimilarityCandidate",
    "SchemaCache",
    "SchemaSnapshot",
    "StructureNode",
    "infer_structure",
    "decode_json_value",
    "QueryKind",
    "QueryClassification",
    "classify",
    "ensure_read_only",
    "ensure_write_statement",
    "apply_row_cap",
    "ErrorEnhancer",
    "extract_table_name",
]
