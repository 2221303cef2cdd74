import json

from teamhub.api.errors import UploadFailed
from teamhub.api.utils import create_access_token
from teamhub.realtime.hub import RealtimeHub


class FakeWebSocket:
    """Collects frames sent through a `Connection`."""

    def __init__(self, fail=False):
        self.fail = fail
        self.frames = []

    async def send_text(self, text):
        if self.fail:
            raise RuntimeError("socket closed")
        self.frames.append(json.loads(text))

    def events(self):
        return [frame["event"] for frame in self.frames]


class RecordingHub(RealtimeHub):
    def __init__(self):
        super().__init__()
        self.emitted = []

    async def emit(self, channel, event, data, exclude=None):
        self.emitted.append((channel, event, data))
        return await super().emit(channel, event, data, exclude=exclude)


class FakeUploader:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []
        self.deleted = []

    def upload(self, image_file, folder):
        self.calls.append((image_file, folder))
        if self.fail:
            raise UploadFailed()
        key = f"{folder}/{len(self.calls)}.jpg"
        return {"url": f"https://cdn.test/{key}", "key": key}

    def delete(self, key):
        self.deleted.append(key)


def auth_header(user):
    token = create_access_token({"userId": user.id, "teamId": user.team_id})
    return {"Authorization": f"Bearer {token}"}
