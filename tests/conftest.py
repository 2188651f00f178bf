from tests.fixtures.factories import *
