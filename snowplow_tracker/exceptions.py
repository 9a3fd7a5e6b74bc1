class ContractFailure(TypeError):
    """Raised when a caller breaks the tracker protocol grammar.

    Malformed protocol tuples, unknown encodings, unknown event kinds
    and malformed payload modifiers all end up here. These are bugs in
    the event-construction code and are raised at the offending call,
    never deferred to send time.
    """


__all__ = ["ContractFailure"]
