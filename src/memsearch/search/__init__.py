"""
Search indexing and scoring package.

This package provides the pure-Python engine internals:
- analyzers: Text normalization and stemming
- fuzzy: Edit distance and its memoization cache
- schema: Field types, weights and document validation
- document_store: Documents keyed by structural equality
- inverted_index: Stemmed term to document lookup with fuzzy matching
- scorer: Weighted phrase/word/number/boolean scoring
- filters: where clauses and score thresholds
- query_cache: Ranked hit lists per query
"""
