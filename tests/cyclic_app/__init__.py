from beanstalk.decorators import component


@component
class A:
    def __init__(self, b: "B"):
        self.b = b


@component
class B:
    def __init__(self, a: A):
        self.a = a
