from .leapfrog import leapfrog, leapfrogStep
