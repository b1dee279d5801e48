from . import version
from . import interpreter
from .model import (Boolean, BinaryOperation, Claim, Clause, Comment, Comparison, Conjunction,
                    Constant, Disjunction, ExclusiveDisjunction, Expression, Fact, FunctionCall,
                    Inference, Number, Query, Roll, Rolling, String, Variable, Verify,
                    expression_of, make_fact, make_roll)
from .util import (EntmootError, GroundingError, OperandTypeError, UnboundVariableError,
                   UnverifiedClaimError, UsageError)

Interpreter = interpreter.Interpreter # give easy access to the Interpreter class
