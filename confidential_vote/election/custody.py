# confidential_vote/election/custody.py


class CiphertextCustody:
    """Grants on ciphertexts produced by the engine.

    `keep` is for values that outlive the operation (counts, quotas, ids,
    the winner): the engine and the administrator get persistent grants.
    `scratch` is for intermediates: the administrator gets a grant scoped to
    the running operation only.
    """

    def __init__(self, acl, executor, administrator):
        self.acl = acl
        self.executor = executor
        self.administrator = administrator

    def keep(self, ciphertext):
        self.acl.allow(ciphertext, self.executor)
        self.acl.allow(ciphertext, self.administrator)
        return ciphertext

    def scratch(self, ciphertext):
        self.acl.allow_transient(ciphertext, self.administrator)
        return ciphertext
