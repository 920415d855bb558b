"""beanstalk-deploy - deploy a version to Elastic Beanstalk and wait for it to settle."""

__version__ = "1.0.0"
