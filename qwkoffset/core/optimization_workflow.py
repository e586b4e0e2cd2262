"""Kappa optimization workflow orchestrator.

Coordinates the full pipeline: assemble -> validate -> optimize -> package.
This is the bridge between the data source boundary and domain math.

Depends on: core.*, domain.*.
"""

import datetime
import logging
from typing import Tuple

from .. import __version__
from ..domain.errors import EmptyDatasetError, InvalidMatrixError
from ..domain.models import OptimizationConfig, OptimizationResult, RunMetadata
from ..domain.optimizer import optimize_contingency_matrix
from .contingency_builder import build_raw_contingency, score_edges
from .data_source import DataSource
from .input_validator import ValidationResult, validate_contingency_inputs

logger = logging.getLogger(__name__)


def run_optimization(
    source: DataSource,
    config: OptimizationConfig,
) -> Tuple[OptimizationResult, ValidationResult, RunMetadata]:
    """Execute the full kappa optimization workflow.

    Args:
        source: Data source supplying category ranges and partition counts.
        config: Run configuration.

    Returns:
        (result, validation, metadata)

    Raises:
        EmptyDatasetError: If the assembled matrix has zero total count.
        InvalidMatrixError: On any other fatal validation issue.
    """
    logger.info(
        "Starting kappa optimization for field %r", config.objective_field
    )

    # --- Step 1: Category range ---
    category_range = config.category_range
    if category_range is None:
        category_range = source.category_range(config.objective_field)

    # --- Step 2: Assemble raw contingency matrix ---
    edges = score_edges(config.score_min, config.score_max, config.n_bins)
    raw, partitions = build_raw_contingency(
        source, config.objective_field, edges
    )

    # --- Step 3: Validate ---
    validation = validate_contingency_inputs(raw, category_range, partitions)
    if not validation.is_valid:
        message = "Validation failed:\n" + "\n".join(
            f"  [{i.severity}] {i.message}" for i in validation.fatal_issues
        )
        logger.error(message)
        if not raw.entries or all(v == 0 for _, v in raw):
            raise EmptyDatasetError(message)
        raise InvalidMatrixError(message)

    if validation.has_warnings:
        for issue in validation.warnings:
            logger.warning("Validation: %s", issue.message)

    # --- Step 4: Optimize ---
    result = optimize_contingency_matrix(
        raw,
        enable_optimization=config.enable_optimization,
        category_range=category_range,
    )

    if result.adj_kappac is not None:
        logger.info(
            "Kappa optimization complete: kappa-complement %.4f -> %.4f",
            result.kappac, result.adj_kappac,
        )
    else:
        logger.info(
            "Kappa computed: kappa-complement %.4f", result.kappac
        )

    # --- Step 5: Build provenance ---
    metadata = RunMetadata(
        package_version=__version__,
        timestamp=datetime.datetime.now(datetime.timezone.utc).isoformat(),
        objective_field=config.objective_field,
        category_range=(category_range.lo, category_range.hi),
        partitions=partitions,
        parameters={
            "score_min": config.score_min,
            "score_max": config.score_max,
            "n_bins": config.n_bins,
            "enable_optimization": config.enable_optimization,
        },
    )

    return result, validation, metadata
