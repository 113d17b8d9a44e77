"""Distributed bloom filter with seed-derived hash chains for peer sync."""
from .bloom import DistBF, new_dbf, new_for_peers
from .codec import decode, encode
from .config import FilterConfig, get_filter_config, reset_filter_config, set_filter_config
from .errors import DecodeError, DistBFError, IndexOutOfRange, InvalidArgument, SeedMismatch
from .hashing import combine, derive_chain, derive_round_seed, digest, generate_seed
from .mapping import bytes_to_index, indices_for
from .params import estimate_for_peers, estimate_parameters
from .reconcile import SyncPlan, compare, plan_sync, sync_missing

__all__ = [
    'DistBF', 'new_dbf', 'new_for_peers',
    'encode', 'decode',
    'FilterConfig', 'get_filter_config', 'set_filter_config', 'reset_filter_config',
    'DistBFError', 'InvalidArgument', 'IndexOutOfRange', 'DecodeError', 'SeedMismatch',
    'digest', 'derive_chain', 'combine', 'generate_seed', 'derive_round_seed',
    'indices_for', 'bytes_to_index',
    'estimate_parameters', 'estimate_for_peers',
    'compare', 'sync_missing', 'plan_sync', 'SyncPlan',
]
