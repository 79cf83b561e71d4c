from .version import VERSION
from .template import Template
from .util import ref, get_att, join
from .validation import TemplateError
