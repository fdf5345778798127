"""Batch step identifiers.

Contains the closed enumerations that name each sub-phase of a batch job's
pipeline. Every enumeration carries an explicit ``UNKNOWN`` member so that step
classification is total.

Step Taxonomy
=============

**News batch** (``BatchStep``)

    | Value | Phase |
    |-------|-------|
    | world-news-fetch | World headlines fetched from the news API |
    | japan-news-fetch | Japanese headlines fetched from the RSS feed |
    | world-news-summary | AI summary of world news |
    | japan-news-summary | AI summary of Japanese news |
    | firestore-save | Document store write |
    | metadata-update | Batch metadata write |
    | unknown | Anything the pipeline reported that is not listed above |

**Terms batch** (``TermsBatchStep``)

    | Value | Phase |
    |-------|-------|
    | term-generation-beginner | Beginner term generated |
    | term-generation-intermediate | Intermediate term generated |
    | term-generation-advanced | Advanced term generated |
    | duplicate-check | Term history duplicate check |
    | firestore-save | Document store write |
    | history-update | Term history write |
    | metadata-update | Batch metadata write |
    | unknown | Anything else |
"""

from __future__ import annotations

from enum import Enum


class BatchStep(str, Enum):
    """Named sub-phases of the news batch pipeline."""

    WORLD_NEWS_FETCH = "world-news-fetch"
    JAPAN_NEWS_FETCH = "japan-news-fetch"
    WORLD_NEWS_SUMMARY = "world-news-summary"
    JAPAN_NEWS_SUMMARY = "japan-news-summary"
    FIRESTORE_SAVE = "firestore-save"
    METADATA_UPDATE = "metadata-update"
    UNKNOWN = "unknown"


class TermsBatchStep(str, Enum):
    """Named sub-phases of the investment-terms batch pipeline."""

    TERM_GENERATION_BEGINNER = "term-generation-beginner"
    TERM_GENERATION_INTERMEDIATE = "term-generation-intermediate"
    TERM_GENERATION_ADVANCED = "term-generation-advanced"
    DUPLICATE_CHECK = "duplicate-check"
    FIRESTORE_SAVE = "firestore-save"
    HISTORY_UPDATE = "history-update"
    METADATA_UPDATE = "metadata-update"
    UNKNOWN = "unknown"


# Any step enumeration usable by ErrorClassifier / StepLogger
StepType = BatchStep | TermsBatchStep
