"""Scripted stand-ins for the calling side of an invocation."""

import anyio

from mcp_starter.dispatcher import Peer

_UNSET = object()


class ScriptedPeer(Peer):
    """Peer with canned answers.

    Leave ``sampling_reply`` unset to advertise no sampling support, and
    ``elicitation`` as None to advertise no elicitation support. With
    ``block`` set every nested request hangs until cancelled.
    """

    def __init__(self, sampling_reply=_UNSET, elicitation=None, url_elicitation=False, block=False):
        self.sampling_reply = sampling_reply
        self.elicitation = elicitation
        self.url_elicitation = url_elicitation
        self.block = block
        self.requests = []
        self.progress = []

    def supports_sampling(self):
        return self.sampling_reply is not _UNSET

    def supports_elicitation(self, mode="form"):
        if self.elicitation is None:
            return False
        return mode == "form" or self.url_elicitation

    async def sample(self, prompt, max_tokens):
        self.requests.append(("sample", prompt, max_tokens))
        if self.block:
            await anyio.sleep_forever()
        return self.sampling_reply

    async def elicit_form(self, message, schema):
        self.requests.append(("form", message, schema))
        if self.block:
            await anyio.sleep_forever()
        return self.elicitation

    async def elicit_url(self, message, url, elicitation_id):
        self.requests.append(("url", message, url, elicitation_id))
        if self.block:
            await anyio.sleep_forever()
        return self.elicitation

    async def report_progress(self, progress, total, message):
        self.progress.append((progress, total, message))
