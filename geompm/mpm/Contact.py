from geompm.utils.ObjectIO import DictIO


class ContactBase(object):
    def __init__(self, contact_phys):
        self._name = None
        self._friction = DictIO.GetAlternative(contact_phys, "Friction", 0.)
        if not self._friction >= 0.:
            raise ValueError(f"Keyword:: /Friction: {self._friction}/ should not be negative")

    def print_contact_message(self, *arg, **kwargs):
        raise NotImplementedError

    @property
    def name(self):
        return self._name

    @property
    def friction(self):
        return self._friction

    @friction.setter
    def friction(self, friction):
        self._friction = friction


class MPMContact(ContactBase):
    """
    Multi-velocity-field contact: every body keeps its own grid layer and bodies meeting at a
    node are pushed back to the centre-of-mass velocity along the contact normal. The tangential
    correction obeys Coulomb friction.
    """
    def __init__(self, contact_phys):
        super().__init__(contact_phys)
        self._name = "MPMContact"

    def print_contact_message(self):
        print(" Contact Information ".center(71, '-'))
        print("Contact Type: ", self.name)
        print("Friction Coefficient =", self.friction, '\n')
