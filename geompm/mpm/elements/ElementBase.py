class ElementBase(object):
    def __init__(self, element_type) -> None:
        self.element_type = element_type
        self.gridSum = 0
        self.gnum = [0, 0, 0]
        self.cnum = [0, 0, 0]

    def create_nodes(self, *args):
        raise NotImplementedError

    def element_initialize(self, *args):
        raise NotImplementedError

    def calc_volume(self):
        raise NotImplementedError

    def calculate(self, *args):
        raise NotImplementedError

    def get_boundary_nodes(self, *args):
        raise NotImplementedError

    def calc_critical_timestep(self, *args):
        raise NotImplementedError
