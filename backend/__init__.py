from .loader import load_tabular_file, get_sample_rows
from .analyzer import analyze_columns_step1, OpenAIMappingOracle
from .merger import merge_datasets, validate_correspondences, add_identical_column_mappings
from .exporter import export_to_csv, export_to_csv_bytes, build_download_filename
from .models import TabularDataset, Correspondence, MappingProposal, MergedDataset, NO_VALUE
from .errors import InputValidationError, MappingConflictError, UpstreamError, FileParseError, OracleError
from .reviewer import mappings_to_table, table_to_mappings
