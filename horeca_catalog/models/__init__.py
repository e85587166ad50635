# horeca_catalog/models/__init__.py
from horeca_catalog.models.category import CategoryLevel, build_category_tree, collect_descendant_ids, find_node
from horeca_catalog.models.enquiry import EnquiryStatus
from horeca_catalog.models.product import normalize_filters, normalize_filter_label

__all__ = [
    'CategoryLevel',
    'build_category_tree',
    'collect_descendant_ids',
    'find_node',
    'EnquiryStatus',
    'normalize_filters',
    'normalize_filter_label',
]
