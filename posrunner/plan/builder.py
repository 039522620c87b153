from typing import Optional

from posrunner.logger import logger
from .mapping import V1V2Mapping
from .selection import Selection
from .session import Session
from .track import Track

class Plan:
    def __init__(self, session: Session, selection: Selection, tracks):
        self.session = session
        self.selection = selection
        self.tracks = tracks

    def __rich_repr__(self):
        yield "session", self.session
        yield "selection", self.selection
        yield "tracks", self.tracks

    def get_session(self):
        return self.session

    def get_selection(self):
        return self.selection

    def get_tracks(self):
        return list(self.tracks.values())

    def get_track(self, label):
        if label not in self.tracks:
            raise ValueError(f"Plan has no track {label}")

        return self.tracks[label]

    def get_single_track(self):
        if self.session.is_dual():
            raise ValueError("A dual version plan has two tracks")

        return self.get_tracks()[0]

class CommandPlanBuilder:
    V1V2_TEST_NAME_VARIABLE = "V1V2 TEST NAME"

    def __init__(self, session: Session, mapping: Optional[V1V2Mapping] = None):
        if not isinstance(session, Session):
            raise ValueError(f"Session must be a Session: {session}")

        if session.is_dual() and mapping is None:
            raise ValueError("Dual version plans need a V1V2 mapping")

        self.session = session
        self.mapping = mapping

    def new_tracks(self):
        return {
            label: Track(label, self.session.get_runner_prefix())
            for label in self.session.get_version_mode().get_track_labels()
        }

    def build(self, selection: Selection) -> Plan:
        if not isinstance(selection, Selection):
            raise ValueError(f"Selection must be a Selection: {selection}")

        tracks = self.new_tracks()

        if self.session.is_dual():
            self.add_dual_tests(selection, tracks["V1"], tracks["V2"])

        else:
            track = list(tracks.values())[0]
            for name in selection:
                track.add_test(name)

        for track in tracks.values():
            logger.debug(
                "[{}] {} test(s): {}".format(
                    track.get_label(),
                    len(track.get_tests()),
                    track.get_tests()
                )
            )

        return Plan(self.session, selection, tracks)

    def add_dual_tests(self, selection, v1_track, v2_track):
        for name in selection:
            v1_name, v2_name = self.mapping.resolve(name)

            if v1_name is not None:
                v1_track.add_test(v1_name)

            if v2_name is not None:
                v2_track.add_test(v2_name)

            logger.debug(f"{name} maps to V1={v1_name} V2={v2_name}")

        for name in selection:
            v1_track.add_variable(self.V1V2_TEST_NAME_VARIABLE, name)
            v2_track.add_variable(self.V1V2_TEST_NAME_VARIABLE, name)
