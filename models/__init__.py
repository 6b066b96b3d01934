# models/__init__.py
# Model registry; importing here makes every table visible to Flask-Migrate

from .proposal import Proposal
from .reviewer import Reviewer
from .criterion import Criterion
from .score import Score
from .evaluation import Evaluation
